# -*- coding: utf-8 -*-
"""Wiring shared by the Telegram bot, the HTTP API and the tests."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional

from aurora_planner.config import Settings
from aurora_planner.domain.auth.service import TokenAuthenticator
from aurora_planner.domain.common.ports import Clock, IdGenerator
from aurora_planner.domain.common.time import to_utc_iso
from aurora_planner.domain.patterns.updater import PatternUpdater
from aurora_planner.domain.reminders.service import ReminderConfig, ReminderService
from aurora_planner.domain.suggestions.engine import AnalysisEngine
from aurora_planner.domain.suggestions.lifecycle import SuggestionLifecycle
from aurora_planner.domain.suggestions.policy import AutoApplyPolicy
from aurora_planner.domain.suggestions.ports import SuggestionGenerator
from aurora_planner.domain.tasks.service import TaskService
from aurora_planner.infra.clock.system_clock import SystemClock
from aurora_planner.infra.db.connection import Database
from aurora_planner.infra.db.repo.analytics_sqlite import AnalyticsSqliteRepo
from aurora_planner.infra.db.repo.patterns_sqlite import PatternsSqliteRepo
from aurora_planner.infra.db.repo.reminders_sqlite import ReminderMarksSqliteRepo
from aurora_planner.infra.db.repo.suggestions_sqlite import SuggestionsSqliteRepo
from aurora_planner.infra.db.repo.tasks_sqlite import TasksSqliteRepo
from aurora_planner.infra.db.repo.tokens_sqlite import TokensSqliteRepo
from aurora_planner.infra.db.schema_version import apply_migrations
from aurora_planner.infra.ids.uuid_gen import UuidGenerator
from aurora_planner.infra.llm.openai_suggestions import OpenAISuggestionGenerator


@dataclass
class Services:
    db: Database
    clock: Clock
    tasks_repo: TasksSqliteRepo
    analytics_repo: AnalyticsSqliteRepo
    patterns_repo: PatternsSqliteRepo
    suggestions_repo: SuggestionsSqliteRepo
    tasks: TaskService
    patterns: PatternUpdater
    engine: AnalysisEngine
    lifecycle: SuggestionLifecycle
    reminders: ReminderService
    auth: TokenAuthenticator


def resolve_db_path(db_path: Path, root: Optional[Path] = None) -> Path:
    """One place for the db path: always absolute, directory exists."""
    if not db_path.is_absolute():
        db_path = (root or Path.cwd()) / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


def build_services(
    db: Database,
    clock: Clock,
    generator: SuggestionGenerator,
    ids: Optional[IdGenerator] = None,
    policy: AutoApplyPolicy = AutoApplyPolicy(),
    tz: Optional[tzinfo] = None,
    reminder_cfg: ReminderConfig = ReminderConfig(),
) -> Services:
    ids = ids or UuidGenerator()
    if tz is None:
        tz = clock.now().tzinfo

    tasks_repo = TasksSqliteRepo(db)
    analytics_repo = AnalyticsSqliteRepo(db)
    patterns_repo = PatternsSqliteRepo(db)
    suggestions_repo = SuggestionsSqliteRepo(db)
    marks_repo = ReminderMarksSqliteRepo(db)

    tasks = TaskService(tasks_repo, analytics_repo, clock, ids, reminder_marks=marks_repo)
    updater = PatternUpdater(patterns_repo, tasks_repo, analytics_repo, clock, tz=tz)
    engine = AnalysisEngine(
        tasks=tasks_repo,
        patterns=patterns_repo,
        analytics=analytics_repo,
        suggestions=suggestions_repo,
        generator=generator,
        task_service=tasks,
        pattern_updater=updater,
        clock=clock,
        ids=ids,
        policy=policy,
    )
    return Services(
        db=db,
        clock=clock,
        tasks_repo=tasks_repo,
        analytics_repo=analytics_repo,
        patterns_repo=patterns_repo,
        suggestions_repo=suggestions_repo,
        tasks=tasks,
        patterns=updater,
        engine=engine,
        lifecycle=SuggestionLifecycle(suggestions_repo, tasks, clock),
        reminders=ReminderService(tasks_repo, marks_repo, clock, cfg=reminder_cfg, display_tz=tz),
        auth=TokenAuthenticator(TokensSqliteRepo(db), clock),
    )


async def bootstrap(settings: Settings, root: Optional[Path] = None) -> Services:
    """Resolve the db, run migrations and build everything from settings."""
    db = Database(str(resolve_db_path(settings.db_path, root)))
    clock = SystemClock(settings.timezone)
    await apply_migrations(db, now_iso=to_utc_iso(clock.now()))

    generator = OpenAISuggestionGenerator(
        api_key=settings.openai_api_key,
        model=settings.ai_model,
        base_url=settings.openai_base_url,
    )
    return build_services(
        db=db,
        clock=clock,
        generator=generator,
        policy=settings.auto_apply_policy,
        tz=clock.tz,
        reminder_cfg=ReminderConfig(lead_minutes=settings.reminder_lead_minutes),
    )
