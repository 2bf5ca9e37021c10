"""Toggleable conformance checks applied after declared expectations."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import pluggy
from loguru import logger

from skillcheck.envelope import SkillResponse
from skillcheck.errors import UnknownFeatureError
from skillcheck.hookspecs import SKILLCHECK_HOOK_NAMESPACE, ConformanceSpecs, hookimpl
from skillcheck.types import Failure, ResponseFacets

QUESTION_MARK_CHECK = "questionMarkCheck"
QUESTION_MARKS = frozenset("?՞؟⸮？")

type ExtraFeatures = Mapping[str, bool]


def has_question_mark(text: str) -> bool:
    return any(char in QUESTION_MARKS for char in text)


class QuestionMarkCheck:
    """Responses asking a question keep the session open; the rest end it."""

    @hookimpl
    def check_response(self, facets: ResponseFacets) -> Failure | None:
        if facets.speech is None:
            return None
        asks = has_question_mark(facets.speech)
        if facets.ends_session and asks:
            return Failure(
                message="Possible Certification Problem: The response ends the session but contains a question mark."
            )
        if not facets.ends_session and not asks:
            return Failure(
                message=(
                    "Possible Certification Problem: "
                    "The response keeps the session open but does not contain a question mark."
                )
            )
        return None


class ConformanceChecks:
    """Registry of conformance checks, each gated by a feature toggle."""

    def __init__(self) -> None:
        self._plugin_manager = pluggy.PluginManager(SKILLCHECK_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(ConformanceSpecs)
        self._toggles: dict[str, bool] = {}

    @classmethod
    def with_builtins(cls) -> ConformanceChecks:
        checks = cls()
        checks.register(QUESTION_MARK_CHECK, QuestionMarkCheck())
        return checks

    def register(self, key: str, plugin: Any, *, enabled: bool = True) -> None:
        """Register a check plugin under a feature key."""

        self._plugin_manager.register(plugin, name=key)
        self._toggles[key] = bool(enabled)

    def set_enabled(self, key: str, enabled: bool) -> None:
        if key not in self._toggles:
            raise UnknownFeatureError(f"Framework has no feature with key '{key}'.")
        self._toggles[key] = bool(enabled)

    def is_enabled(self, key: str) -> bool:
        if key not in self._toggles:
            raise UnknownFeatureError(f"Framework has no feature with key '{key}'.")
        return self._toggles[key]

    def snapshot(self) -> ExtraFeatures:
        """Freeze the current toggles for one sequence run."""

        return MappingProxyType(dict(self._toggles))

    def first_failure(
        self,
        features: ExtraFeatures,
        *,
        facets: ResponseFacets,
        response: SkillResponse,
    ) -> Failure | None:
        """Run enabled checks in registration order and return the first failure."""

        kwargs = {"facets": facets, "response": response}
        for impl in self._plugin_manager.hook.check_response.get_hookimpls():
            if not features.get(impl.plugin_name, False):
                continue
            call_kwargs = {name: kwargs[name] for name in impl.argnames if name in kwargs}
            failure = impl.function(**call_kwargs)
            if failure is not None:
                logger.debug("conformance.failed check={}", impl.plugin_name)
                return failure
        return None
