from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from skillcheck.config import Settings
from skillcheck.harness import Harness

APP_ID = "amzn1.ask.skill.00000000-0000-0000-0000-000000000000"
USER_ID = "amzn1.ask.account.TEST"


class ScriptedSkill:
    """Handler answering each call with the next scripted response, recording events."""

    def __init__(self, responses: list[Any | Callable[[dict[str, Any]], Any]]) -> None:
        self._responses = list(responses)
        self.events: list[dict[str, Any]] = []

    def handler(self, event: dict[str, Any], context: Any) -> Any:
        self.events.append(event)
        response = self._responses[len(self.events) - 1]
        if callable(response):
            return response(event)
        return response


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, locale="en-US", invocation_timeout_seconds=0.5)


@pytest.fixture
def harness(settings: Settings) -> Harness:
    return Harness(settings)


@pytest.fixture
def scripted(harness: Harness) -> Callable[[list[Any]], ScriptedSkill]:
    def bind(responses: list[Any]) -> ScriptedSkill:
        skill = ScriptedSkill(responses)
        harness.initialize(skill, APP_ID, USER_ID)
        return skill

    return bind
