"""
Handler tests: aiogram handlers are plain coroutines, called here with a stub message.
"""
from __future__ import annotations

import asyncio
import re

import pytest

from aurora_planner.domain.auth.service import Identity
from aurora_planner.domain.common.errors import AuthenticationError
from aurora_planner.ui.telegram.handlers.insights import token
from aurora_planner.ui.telegram.handlers.suggestions import analyze

from support import FakeGenerator, run_with_services, suggestion_item


class StubMessage:
    def __init__(self, text: str) -> None:
        self.text = text
        self.answers: list[str] = []

    async def answer(self, text: str, **kwargs) -> None:
        self.answers.append(text)


def _issued(message: StubMessage) -> str:
    match = re.search(r"<code>(.+)</code>", message.answers[-1])
    assert match, message.answers
    return match.group(1)


def test_token_command_issues_personal_token():
    async def run(services):
        msg = StubMessage("/token")
        await token(msg, services, "42")
        identity = await services.auth.authenticate(f"Bearer {_issued(msg)}")
        assert identity == Identity(user_id="42", is_service=False)

    asyncio.run(run_with_services(run))


def test_token_service_can_act_for_other_users():
    async def run(services):
        msg = StubMessage("/token service")
        await token(msg, services, "42")
        assert msg.answers[-1].startswith("Service token")

        identity = await services.auth.authenticate(f"Bearer {_issued(msg)}")
        assert identity.is_service is True
        assert identity.acting_for("1001") == "1001"

    asyncio.run(run_with_services(run))


def test_token_rotation_revokes_previous():
    async def run(services):
        first = StubMessage("/token service")
        await token(first, services, "42")
        second = StubMessage("/token")
        await token(second, services, "42")

        with pytest.raises(AuthenticationError):
            await services.auth.authenticate(f"Bearer {_issued(first)}")
        new_identity = await services.auth.authenticate(f"Bearer {_issued(second)}")
        assert new_identity.is_service is False

    asyncio.run(run_with_services(run))


def test_token_rejects_unknown_kind():
    async def run(services):
        msg = StubMessage("/token admin")
        await token(msg, services, "42")
        assert msg.answers == ["Usage: /token [service]"]

    asyncio.run(run_with_services(run))


def test_analyze_reports_only_materialized_suggestions():
    gen = FakeGenerator()

    async def run(services):
        gen.items = [
            suggestion_item("new_task", {"title": "Gym", "scheduled_date": "2024-05-07T17:00:00Z"}, 0.9),
            suggestion_item("reschedule", {"task_id": "t", "new_time": "2024-05-08T09:00:00Z"}, 0.95),
            suggestion_item("time_block", {"label": "Focus"}, 0.4, title="Focus block"),
        ]
        msg = StubMessage("/analyze")
        await analyze(msg, services, "42")

        assert "Generated 3 intelligent suggestions" in msg.answers
        assert "1 applied to your tasks automatically." in msg.answers
        # only the pending one is offered with buttons
        assert sum("Focus block" in a for a in msg.answers) == 1

    asyncio.run(run_with_services(run, generator=gen))
