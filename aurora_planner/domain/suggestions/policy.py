from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet

from aurora_planner.domain.suggestions.models import AUTO_APPLIED, PENDING, SUGGESTION_TYPES, SuggestionDraft

DEFAULT_THRESHOLD = 0.8


@dataclass(frozen=True)
class AutoApplyPolicy:
    """
    What happens to a suggestion whose confidence is above the threshold.

    mark_types: stored as auto_applied instead of pending.
    materialize_types: also written into the task store right away.

    The defaults mark every type but materialize only new_task, so a confident
    reschedule is recorded as auto_applied without moving the task.
    """

    threshold: float = DEFAULT_THRESHOLD
    mark_types: FrozenSet[str] = frozenset(SUGGESTION_TYPES)
    materialize_types: FrozenSet[str] = frozenset({"new_task"})

    def is_confident(self, draft: SuggestionDraft) -> bool:
        return draft.confidence > self.threshold

    def should_materialize(self, draft: SuggestionDraft) -> bool:
        return self.is_confident(draft) and draft.type in self.materialize_types

    def initial_status(self, draft: SuggestionDraft) -> str:
        if self.is_confident(draft) and (draft.type in self.mark_types or draft.type in self.materialize_types):
            return AUTO_APPLIED
        return PENDING
