"""
Tests for applying and rejecting stored suggestions.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from aurora_planner.domain.common.errors import ConflictError, NotFoundError, ValidationError
from aurora_planner.domain.suggestions.models import ACCEPTED, AUTO_APPLIED, PENDING, REJECTED, Suggestion
from aurora_planner.domain.tasks.models import NewTask

from support import NOW, run_with_services


async def _seed(services, stype: str, data: dict, user_id: str = "u1", status: str = PENDING, sid: str = "s-1"):
    s = Suggestion(
        id=sid,
        user_id=user_id,
        suggestion_type=stype,
        title="Try this",
        reason="Pattern",
        data=data,
        confidence=0.6,
        status=status,
        created_at=NOW,
    )
    await services.suggestions_repo.insert(s)
    return s


async def _task(services, user_id: str = "u1", title: str = "Report"):
    return await services.tasks.add_task(
        user_id, NewTask(title=title, scheduled_date=NOW + timedelta(hours=2))
    )


def test_apply_reschedule_moves_task_and_accepts():
    async def run(services):
        task = await _task(services)
        await _seed(services, "reschedule", {"task_id": task.id, "new_time": "2024-05-09T10:30:00Z"})

        applied = await services.lifecycle.apply_suggestion("u1", "s-1")
        assert applied.status == ACCEPTED

        moved = await services.tasks.get_task("u1", task.id)
        assert moved.scheduled_date == datetime(2024, 5, 9, 10, 30, tzinfo=timezone.utc)

        stored = await services.suggestions_repo.get("u1", "s-1")
        assert stored.status == ACCEPTED
        assert stored.applied_at is not None
        assert await services.lifecycle.list_pending("u1") == []

    asyncio.run(run_with_services(run))


def test_apply_reprioritize():
    async def run(services):
        task = await _task(services)
        await _seed(services, "reprioritize", {"task_id": task.id, "new_priority": "high"})
        await services.lifecycle.apply_suggestion("u1", "s-1")
        assert (await services.tasks.get_task("u1", task.id)).priority == "high"

    asyncio.run(run_with_services(run))


def test_apply_new_task_inserts():
    async def run(services):
        await _seed(services, "new_task", {"title": "Stretch", "scheduled_date": "2024-05-06T18:00:00+03:00"})
        await services.lifecycle.apply_suggestion("u1", "s-1")
        tasks = await services.tasks.list_tasks("u1")
        assert [t.title for t in tasks] == ["Stretch"]
        assert tasks[0].scheduled_date == datetime(2024, 5, 6, 15, 0, tzinfo=timezone.utc)

    asyncio.run(run_with_services(run))


def test_apply_break_down_only_accepts():
    async def run(services):
        task = await _task(services)
        await _seed(services, "break_down", {"task_id": task.id, "subtasks": ["Outline", {"title": "Draft"}]})
        await services.lifecycle.apply_suggestion("u1", "s-1")
        assert (await services.suggestions_repo.get("u1", "s-1")).status == ACCEPTED
        assert len(await services.tasks.list_tasks("u1")) == 1

    asyncio.run(run_with_services(run))


def test_second_apply_conflicts():
    async def run(services):
        task = await _task(services)
        await _seed(services, "reprioritize", {"task_id": task.id, "new_priority": "low"})
        await services.lifecycle.apply_suggestion("u1", "s-1")
        with pytest.raises(ConflictError):
            await services.lifecycle.apply_suggestion("u1", "s-1")

    asyncio.run(run_with_services(run))


def test_auto_applied_cannot_be_applied_again():
    async def run(services):
        await _seed(services, "new_task", {"title": "X", "scheduled_date": "2024-05-07T10:00:00Z"}, status=AUTO_APPLIED)
        with pytest.raises(ConflictError):
            await services.lifecycle.apply_suggestion("u1", "s-1")
        assert await services.tasks.list_tasks("u1") == []

    asyncio.run(run_with_services(run))


def test_other_users_suggestion_is_not_found():
    async def run(services):
        task = await _task(services, user_id="owner")
        await _seed(services, "reprioritize", {"task_id": task.id, "new_priority": "high"}, user_id="owner")

        with pytest.raises(NotFoundError):
            await services.lifecycle.apply_suggestion("intruder", "s-1")
        with pytest.raises(NotFoundError):
            await services.lifecycle.reject_suggestion("intruder", "s-1")

        assert (await services.tasks.get_task("owner", task.id)).priority == "medium"
        assert (await services.suggestions_repo.get("owner", "s-1")).status == PENDING

    asyncio.run(run_with_services(run))


def test_malformed_payload_stays_pending():
    async def run(services):
        task = await _task(services)
        await _seed(services, "reschedule", {"task_id": task.id})
        with pytest.raises(ValidationError):
            await services.lifecycle.apply_suggestion("u1", "s-1")
        assert (await services.suggestions_repo.get("u1", "s-1")).status == PENDING

    asyncio.run(run_with_services(run))


def test_missing_target_task_stays_pending():
    async def run(services):
        await _seed(services, "reschedule", {"task_id": "nope", "new_time": "2024-05-09T10:30:00Z"})
        with pytest.raises(NotFoundError):
            await services.lifecycle.apply_suggestion("u1", "s-1")
        assert (await services.suggestions_repo.get("u1", "s-1")).status == PENDING

    asyncio.run(run_with_services(run))


def test_target_task_of_other_user_is_not_touched():
    async def run(services):
        foreign = await _task(services, user_id="someone")
        await _seed(services, "reprioritize", {"task_id": foreign.id, "new_priority": "high"})
        with pytest.raises(NotFoundError):
            await services.lifecycle.apply_suggestion("u1", "s-1")
        assert (await services.tasks.get_task("someone", foreign.id)).priority == "medium"

    asyncio.run(run_with_services(run))


def test_reject_never_touches_tasks():
    async def run(services):
        task = await _task(services)
        await _seed(services, "reschedule", {"task_id": task.id, "new_time": "2024-05-09T10:30:00Z"})

        rejected = await services.lifecycle.reject_suggestion("u1", "s-1")
        assert rejected.status == REJECTED
        assert (await services.tasks.get_task("u1", task.id)).scheduled_date == task.scheduled_date

        with pytest.raises(ConflictError):
            await services.lifecycle.reject_suggestion("u1", "s-1")
        with pytest.raises(ConflictError):
            await services.lifecycle.apply_suggestion("u1", "s-1")

    asyncio.run(run_with_services(run))


def test_reject_unknown_is_not_found():
    async def run(services):
        with pytest.raises(NotFoundError):
            await services.lifecycle.reject_suggestion("u1", "missing")

    asyncio.run(run_with_services(run))


def test_new_task_with_overlong_title_stays_pending():
    async def run(services):
        await _seed(services, "new_task", {"title": "y" * 501, "scheduled_date": "2024-05-07T10:00:00Z"})
        with pytest.raises(ValidationError):
            await services.lifecycle.apply_suggestion("u1", "s-1")
        assert (await services.suggestions_repo.get("u1", "s-1")).status == PENDING
        assert await services.tasks.list_tasks("u1") == []

    asyncio.run(run_with_services(run))
