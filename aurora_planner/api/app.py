"""FastAPI service for the planner: the suggestion entry point plus a few read endpoints."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aurora_planner.api.schemas import CompleteTaskRequest, CreateTaskRequest, ImportTasksRequest, PlannerRequest
from aurora_planner.api.serializers import serialize_insights, serialize_suggestion, serialize_task
from aurora_planner.config import Settings, load_settings
from aurora_planner.container import Services, bootstrap
from aurora_planner.domain.auth.service import Identity
from aurora_planner.domain.common.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from aurora_planner.domain.patterns.insights import load_insights
from aurora_planner.domain.tasks.models import NewTask

logger = logging.getLogger(__name__)

PLANNER_PATH = "/functions/v1/agentic-ai-planner"

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (UpstreamError, 502),
)


def status_for(exc: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_identity(
    authorization: Optional[str] = Header(None),
    services: Services = Depends(get_services),
) -> Identity:
    return await services.auth.authenticate(authorization)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _new_task(body: CreateTaskRequest) -> NewTask:
    return NewTask(
        title=body.title,
        scheduled_date=_aware(body.scheduled_date),
        description=body.description,
        priority=body.priority,
        category=body.category,
        is_outdoor=body.is_outdoor,
    )


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Tests pass ready-made services; otherwise they are
    bootstrapped from the environment on startup.
    """
    if settings is None and services is None:
        settings = load_settings(require_bot=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = await bootstrap(settings)
            logger.info("API services ready")
        yield

    app = FastAPI(
        title="Aurora Planner API",
        version="0.3.0",
        description="Task planner with AI scheduling suggestions.",
        lifespan=lifespan,
    )
    app.state.services = services

    origins = list(settings.allowed_origins) if settings else []
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error("Request to %s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=status, content={"error": str(exc)})

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}

    @app.post(PLANNER_PATH)
    async def planner(
        body: PlannerRequest,
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        user_id = identity.acting_for(body.user_id)
        logger.info("Planner action %s for user %s", body.action, user_id)

        if body.action == "analyze_and_suggest":
            result = await services.engine.analyze_and_suggest(user_id)
            return {
                "success": True,
                "suggestions": [serialize_suggestion(s) for s in result.suggestions],
                "message": result.message,
            }

        if body.action in ("apply_suggestion", "reject_suggestion"):
            if not body.suggestion_id:
                raise ValidationError("suggestionId is required")
            if body.action == "apply_suggestion":
                await services.lifecycle.apply_suggestion(user_id, body.suggestion_id)
                return {"success": True, "message": "Suggestion applied"}
            await services.lifecycle.reject_suggestion(user_id, body.suggestion_id)
            return {"success": True, "message": "Suggestion rejected"}

        raise ValidationError("Invalid action")

    @app.get("/suggestions")
    async def list_pending_suggestions(
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        pending = await services.lifecycle.list_pending(identity.user_id)
        return {"suggestions": [serialize_suggestion(s) for s in pending]}

    @app.get("/tasks")
    async def list_tasks(
        start: Optional[datetime] = Query(None),
        end: Optional[datetime] = Query(None),
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        tasks = await services.tasks.list_tasks(
            identity.user_id,
            start=_aware(start) if start else None,
            end=_aware(end) if end else None,
        )
        return {"tasks": [serialize_task(t) for t in tasks]}

    @app.post("/tasks", status_code=201)
    async def create_task(
        body: CreateTaskRequest,
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        task = await services.tasks.add_task(identity.user_id, _new_task(body))
        return {"task": serialize_task(task)}

    @app.post("/tasks/import")
    async def import_tasks(
        body: ImportTasksRequest,
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        """Bulk import from Notion; rows whose notion_id the user already has are skipped."""
        imported, skipped = await services.tasks.import_tasks(
            identity.user_id, [(item.notion_id, _new_task(item)) for item in body.tasks]
        )
        logger.info("Imported %d tasks for user %s, skipped %d", imported, identity.user_id, skipped)
        return {"imported": imported, "skipped": skipped}

    @app.post("/tasks/{task_id}/complete")
    async def complete_task(
        task_id: str,
        body: CompleteTaskRequest,
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        task = await services.tasks.set_completed(identity.user_id, task_id, body.completed)
        return {"task": serialize_task(task)}

    @app.get("/insights")
    async def insights(
        identity: Identity = Depends(get_identity),
        services: Services = Depends(get_services),
    ) -> dict:
        result = await load_insights(
            identity.user_id, services.tasks_repo, services.analytics_repo, services.patterns_repo
        )
        return serialize_insights(result)

    return app
