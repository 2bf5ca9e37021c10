"""Test harness facade: configuration, request building and sequence declaration."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from loguru import logger

from skillcheck.config import Settings, get_settings
from skillcheck.conformance import ConformanceChecks
from skillcheck.errors import ConfigurationError, MissingArgumentError, NotInitializedError
from skillcheck.expectations import Step, normalize_sequence
from skillcheck.i18n import Translator
from skillcheck.request_builder import RequestBuilder, RequestEnvelope, SessionEndedError, SessionEndedReason
from skillcheck.runner import SequenceRunner
from skillcheck.sandbox import Handler
from skillcheck.types import SequenceReport

DEFAULT_TEST_NAME = "returns the correct responses"


class Harness:
    """Drive scripted conversations against one skill handler."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.checks = ConformanceChecks.with_builtins()
        self._builder = RequestBuilder(version=self.settings.version, locale=self.settings.locale)
        self._handler: Handler | None = None
        self._translator: Translator | None = None

    @property
    def locale(self) -> str:
        return self._builder.locale

    @property
    def initialized(self) -> bool:
        return self._handler is not None

    def initialize(self, index: Any, app_id: str, user_id: str) -> None:
        """Bind the skill handler and the identity stamped on every request.

        Args:
            index: Module or object exposing a ``handler`` callable, or the handler itself
            app_id: Skill application id, e.g. "amzn1.ask.skill.00000000-0000-0000-0000-000000000000"
            user_id: User id to test with, e.g. "amzn1.ask.account.LONG_STRING"
        """
        if index is None:
            raise MissingArgumentError("'index' argument must be provided.")
        handler = getattr(index, "handler", None)
        if handler is None and callable(index):
            handler = index
        if not callable(handler):
            raise ConfigurationError("'index' must expose a callable 'handler'.")
        self._handler = handler
        self._builder.application_id = app_id
        self._builder.user_id = user_id
        logger.debug("harness.initialized app_id={} user_id={}", app_id, user_id)

    def initialize_i18n(self, resources: Mapping[str, Mapping[str, Any]], *, fallback_lng: str | None = None) -> None:
        """Load i18next-style resources for ``t`` and step contexts."""

        self._translator = Translator(resources, lng=self.locale, fallback_lng=fallback_lng)

    def set_locale(self, locale: str) -> None:
        """Change the locale used by translation and for newly built requests."""

        if not locale:
            raise MissingArgumentError("'locale' argument must be provided.")
        self._builder.locale = locale
        if self._translator is not None:
            self._translator.change_language(locale)

    def set_extra_feature(self, key: str, enabled: bool) -> None:
        """Enable or disable an optional conformance check."""

        self.checks.set_enabled(key, enabled)

    def register_check(self, key: str, plugin: Any, *, enabled: bool = True) -> None:
        """Add a custom conformance check toggled under ``key``."""

        self.checks.register(key, plugin, enabled=enabled)

    def launch_request(self, locale: str | None = None) -> RequestEnvelope:
        return self._builder.launch(locale)

    def intent_request(
        self,
        intent_name: str,
        slots: Mapping[str, Any] | None = None,
        locale: str | None = None,
    ) -> RequestEnvelope:
        return self._builder.intent(intent_name, slots, locale)

    def session_ended_request(
        self,
        reason: SessionEndedReason | str = SessionEndedReason.USER_INITIATED,
        error: SessionEndedError | None = None,
        locale: str | None = None,
    ) -> RequestEnvelope:
        return self._builder.session_ended(reason, error, locale)

    def t(self, keys: str | list[str], *args: Any, **params: Any) -> Any:
        if self._translator is None:
            raise NotInitializedError("i18n is not initialized. You must call 'initialize_i18n' before calling 't'.")
        return self._translator.t(keys, *args, **params)

    async def run(self, sequence: Iterable[Step | Mapping[str, Any]]) -> SequenceReport:
        """Replay a sequence now, with the feature toggles currently set."""

        runner = self._runner(self.checks.snapshot())
        return await runner.run(sequence)

    def test(
        self,
        sequence: Iterable[Step | Mapping[str, Any]] | None,
        *,
        name: str = DEFAULT_TEST_NAME,
    ) -> Callable[[], None]:
        """Declare a sequence as a test function for pytest to collect.

        The harness must be initialized and the steps are validated now. Feature
        toggles and translations are read when the returned function is called.
        Assign the result to a ``test_*`` module attribute.
        """
        self._require_initialized()
        steps = normalize_sequence(sequence)

        def run_sequence() -> None:
            runner = self._runner(self.checks.snapshot())
            asyncio.run(runner.run(steps))

        run_sequence.__name__ = "test_" + "_".join(name.split())
        run_sequence.__doc__ = name
        return run_sequence

    def _require_initialized(self) -> Handler:
        if self._handler is None:
            raise NotInitializedError("The harness is not initialized. You must call 'initialize' before calling 'test'.")
        return self._handler

    def _runner(self, features: Mapping[str, bool]) -> SequenceRunner:
        return SequenceRunner(
            self._require_initialized(),
            checks=self.checks,
            features=features,
            timeout_seconds=self.settings.invocation_timeout_seconds,
            translator=self._translator,
        )
