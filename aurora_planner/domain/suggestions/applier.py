from __future__ import annotations

import logging
from typing import Optional

from aurora_planner.domain.suggestions.models import (
    NewTaskPayload,
    ReprioritizePayload,
    ReschedulePayload,
    SuggestionPayload,
)
from aurora_planner.domain.tasks.models import Task
from aurora_planner.domain.tasks.service import TaskService

logger = logging.getLogger(__name__)


async def apply_payload(tasks: TaskService, user_id: str, payload: SuggestionPayload) -> Optional[Task]:
    """
    Write a suggestion into the task store.
    break_down and time_block carry no task mutation and are left to the user.
    """
    if isinstance(payload, NewTaskPayload):
        return await tasks.add_task(user_id, payload.task)
    if isinstance(payload, ReschedulePayload):
        await tasks.reschedule(user_id, payload.task_id, payload.new_time)
        return None
    if isinstance(payload, ReprioritizePayload):
        await tasks.set_priority(user_id, payload.task_id, payload.new_priority)
        return None
    logger.debug("No task mutation for %s", type(payload).__name__)
    return None
