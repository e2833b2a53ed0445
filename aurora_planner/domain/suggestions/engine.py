from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from aurora_planner.domain.common.ports import Clock, IdGenerator
from aurora_planner.domain.patterns.ports import PatternRepository
from aurora_planner.domain.patterns.updater import ANALYTICS_WINDOW, PatternUpdater
from aurora_planner.domain.suggestions.applier import apply_payload
from aurora_planner.domain.suggestions.context import SYSTEM_PROMPT, build_analysis_context
from aurora_planner.domain.suggestions.models import (
    Suggestion,
    SuggestionDraft,
    SuggestionPayload,
    parse_draft,
    parse_payload,
)
from aurora_planner.domain.suggestions.policy import AutoApplyPolicy
from aurora_planner.domain.suggestions.ports import SuggestionGenerator, SuggestionRepository
from aurora_planner.domain.tasks.ports import AnalyticsRepository, TaskRepository
from aurora_planner.domain.tasks.service import TaskService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    suggestions: list[Suggestion]
    message: str


@dataclass(frozen=True)
class SweepResult:
    analyzed: int
    errors: int
    total_users: int

    @property
    def message(self) -> str:
        return f"Auto-analysis complete: {self.analyzed} users analyzed, {self.errors} errors"


class AnalysisEngine:
    """
    Reads a user's tasks, patterns and completions, asks the model for
    suggestions, stores them and auto-applies the confident ones.

    Not transactional: a failure half way leaves the writes made so far.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        patterns: PatternRepository,
        analytics: AnalyticsRepository,
        suggestions: SuggestionRepository,
        generator: SuggestionGenerator,
        task_service: TaskService,
        pattern_updater: PatternUpdater,
        clock: Clock,
        ids: IdGenerator,
        policy: AutoApplyPolicy = AutoApplyPolicy(),
    ) -> None:
        self._tasks = tasks
        self._patterns = patterns
        self._analytics = analytics
        self._suggestions = suggestions
        self._generator = generator
        self._task_service = task_service
        self._pattern_updater = pattern_updater
        self._clock = clock
        self._ids = ids
        self._policy = policy

    async def analyze_and_suggest(self, user_id: str) -> AnalysisResult:
        tasks, patterns, analytics = await asyncio.gather(
            self._tasks.list_for_user(user_id),
            self._patterns.list_for_user(user_id),
            self._analytics.recent(user_id, limit=ANALYTICS_WINDOW),
        )

        context = build_analysis_context(self._clock.now(), tasks, patterns, analytics)
        raw = await self._generator.generate(SYSTEM_PROMPT, context)

        # validate everything before the first write
        drafts = [parse_draft(item) for item in raw]
        to_materialize: dict[int, SuggestionPayload] = {
            i: parse_payload(d.type, d.data) for i, d in enumerate(drafts) if self._policy.should_materialize(d)
        }

        stored: list[Suggestion] = []
        for i, draft in enumerate(drafts):
            payload = to_materialize.get(i)
            suggestion = await self._store(user_id, draft, materialized=payload is not None)
            if payload is not None:
                await apply_payload(self._task_service, user_id, payload)
                logger.info("Auto-applied %s suggestion %s", draft.type, suggestion.id)
            stored.append(suggestion)

        await self._pattern_updater.update(user_id, tasks=tasks, analytics=analytics)

        logger.info("Analysis for user %s produced %d suggestions", user_id, len(stored))
        return AnalysisResult(
            suggestions=stored,
            message=f"Generated {len(stored)} intelligent suggestions",
        )

    async def _store(self, user_id: str, draft: SuggestionDraft, materialized: bool) -> Suggestion:
        now = self._clock.now()
        suggestion = Suggestion(
            id=self._ids.new_id(),
            user_id=user_id,
            suggestion_type=draft.type,
            title=draft.title,
            reason=draft.reason,
            data=draft.data,
            confidence=draft.confidence,
            status=self._policy.initial_status(draft),
            created_at=now,
            applied_at=now if materialized else None,
        )
        await self._suggestions.insert(suggestion)
        return suggestion

    async def analyze_all_users(self, user_ids: Optional[Sequence[str]] = None) -> SweepResult:
        """Run the analysis for every user that owns tasks. One user's failure does not stop the sweep."""
        if user_ids is None:
            user_ids = await self._tasks.list_user_ids()

        analyzed = 0
        errors = 0
        for user_id in user_ids:
            try:
                await self.analyze_and_suggest(user_id)
                analyzed += 1
            except Exception:
                errors += 1
                logger.error(f"Analysis failed for user {user_id}", exc_info=True)

        result = SweepResult(analyzed=analyzed, errors=errors, total_users=len(user_ids))
        logger.info(result.message)
        return result
