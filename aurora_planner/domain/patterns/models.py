from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

PRODUCTIVE_HOURS = "productive_hours"
CATEGORY_PREFERENCE = "category_preference"


@dataclass(frozen=True)
class Pattern:
    user_id: str
    pattern_type: str
    pattern_data: Dict[str, Any]
    confidence_score: float
    updated_at: Optional[datetime] = None
