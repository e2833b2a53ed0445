from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import FrozenSet, Optional

from dotenv import load_dotenv

from aurora_planner.domain.suggestions.models import SUGGESTION_TYPES
from aurora_planner.domain.suggestions.policy import DEFAULT_THRESHOLD, AutoApplyPolicy

load_dotenv()


@dataclass(frozen=True)
class Settings:
    bot_token: str
    owner_telegram_id: int
    timezone: str
    db_path: Path
    openai_api_key: str
    openai_base_url: Optional[str]
    ai_model: str
    auto_apply_threshold: float
    auto_apply_materialize: FrozenSet[str]
    auto_apply_mark: FrozenSet[str]
    reminder_lead_minutes: int
    api_host: str
    api_port: int
    allowed_origins: tuple[str, ...] = field(default_factory=tuple)

    @property
    def auto_apply_policy(self) -> AutoApplyPolicy:
        return AutoApplyPolicy(
            threshold=self.auto_apply_threshold,
            mark_types=self.auto_apply_mark,
            materialize_types=self.auto_apply_materialize,
        )


def _type_list(name: str, default: str) -> FrozenSet[str]:
    raw = os.getenv(name, default).strip()
    types = frozenset(t.strip() for t in raw.split(",") if t.strip())
    unknown = types - set(SUGGESTION_TYPES)
    if unknown:
        raise RuntimeError(f"{name} has unknown suggestion types: {', '.join(sorted(unknown))}")
    return types


def load_settings(require_bot: bool = True) -> Settings:
    bot_token = os.getenv("BOT_TOKEN", "").strip()
    owner_id = int(os.getenv("OWNER_TELEGRAM_ID", "0").strip() or "0")
    tz = os.getenv("TZ", "Europe/Helsinki").strip()
    db_raw = os.getenv("DB_PATH", "data/aurora.db").strip()

    if require_bot and not bot_token:
        raise RuntimeError("BOT_TOKEN missing in .env")
    if require_bot and owner_id <= 0:
        raise RuntimeError("OWNER_TELEGRAM_ID missing/invalid in .env")

    threshold = float(os.getenv("AUTO_APPLY_THRESHOLD", str(DEFAULT_THRESHOLD)).strip())
    if not 0.0 <= threshold <= 1.0:
        raise RuntimeError("AUTO_APPLY_THRESHOLD must be between 0 and 1")

    origins = tuple(o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip())

    # db_path may be relative; composition roots resolve it
    return Settings(
        bot_token=bot_token,
        owner_telegram_id=owner_id,
        timezone=tz,
        db_path=Path(db_raw),
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "").strip() or None,
        ai_model=os.getenv("AI_MODEL", "gpt-4o-mini").strip(),
        auto_apply_threshold=threshold,
        auto_apply_materialize=_type_list("AUTO_APPLY_MATERIALIZE", "new_task"),
        auto_apply_mark=_type_list("AUTO_APPLY_MARK", ",".join(SUGGESTION_TYPES)),
        reminder_lead_minutes=int(os.getenv("REMINDER_LEAD_MINUTES", "30").strip()),
        api_host=os.getenv("API_HOST", "127.0.0.1").strip(),
        api_port=int(os.getenv("API_PORT", "8000").strip()),
        allowed_origins=origins,
    )
