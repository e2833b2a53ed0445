from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from aurora_planner.domain.common.errors import ConflictError, NotFoundError
from aurora_planner.domain.common.ports import Clock
from aurora_planner.domain.common.time import to_utc_iso
from aurora_planner.domain.suggestions.applier import apply_payload
from aurora_planner.domain.suggestions.models import (
    ACCEPTED,
    PENDING,
    REJECTED,
    ReprioritizePayload,
    ReschedulePayload,
    Suggestion,
    parse_payload,
)
from aurora_planner.domain.suggestions.ports import SuggestionRepository
from aurora_planner.domain.tasks.service import TaskService

logger = logging.getLogger(__name__)


class SuggestionLifecycle:
    """
    pending -> accepted | rejected. auto_applied and the two decisions are final.

    Apply claims the row (pending -> accepted) before touching tasks, so two
    concurrent applies cannot both mutate. If the mutation fails the claim is
    released and the suggestion is pending again.
    """

    def __init__(self, suggestions: SuggestionRepository, tasks: TaskService, clock: Clock) -> None:
        self._suggestions = suggestions
        self._tasks = tasks
        self._clock = clock

    async def list_pending(self, user_id: str) -> Sequence[Suggestion]:
        return await self._suggestions.list_pending(user_id)

    async def _load_pending(self, user_id: str, suggestion_id: str) -> Suggestion:
        suggestion = await self._suggestions.get(user_id, suggestion_id)
        if suggestion is None:
            raise NotFoundError("Suggestion not found")
        if suggestion.status != PENDING:
            raise ConflictError(f"Suggestion is already {suggestion.status}")
        return suggestion

    async def apply_suggestion(self, user_id: str, suggestion_id: str) -> Suggestion:
        suggestion = await self._load_pending(user_id, suggestion_id)
        payload = parse_payload(suggestion.suggestion_type, suggestion.data)

        if isinstance(payload, (ReschedulePayload, ReprioritizePayload)):
            # NotFoundError here leaves the suggestion pending
            await self._tasks.get_task(user_id, payload.task_id)

        now = self._clock.now()
        claimed = await self._suggestions.transition(
            user_id, suggestion_id, PENDING, ACCEPTED, applied_at_iso=to_utc_iso(now)
        )
        if not claimed:
            raise ConflictError("Suggestion was decided concurrently")

        try:
            await apply_payload(self._tasks, user_id, payload)
        except Exception:
            await self._suggestions.transition(user_id, suggestion_id, ACCEPTED, PENDING, applied_at_iso=None)
            raise

        logger.info("Applied %s suggestion %s", suggestion.suggestion_type, suggestion_id)
        return replace(suggestion, status=ACCEPTED, applied_at=now)

    async def reject_suggestion(self, user_id: str, suggestion_id: str) -> Suggestion:
        suggestion = await self._load_pending(user_id, suggestion_id)
        rejected = await self._suggestions.transition(user_id, suggestion_id, PENDING, REJECTED)
        if not rejected:
            raise ConflictError("Suggestion was decided concurrently")
        logger.info("Rejected suggestion %s", suggestion_id)
        return replace(suggestion, status=REJECTED)
