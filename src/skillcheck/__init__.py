"""skillcheck - replay scripted conversations against voice-skill handlers."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .context import StepContext
from .errors import ConfigurationError, ExpectationViolation, SkillCheckError
from .expectations import Step
from .harness import Harness
from .request_builder import RequestEnvelope, SessionEndedError, SessionEndedReason
from .types import Failure, SequenceReport

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ExpectationViolation",
    "Failure",
    "Harness",
    "RequestEnvelope",
    "SequenceReport",
    "SessionEndedError",
    "SessionEndedReason",
    "SkillCheckError",
    "Step",
    "StepContext",
    "default_harness",
    "initialize",
    "intent_request",
    "launch_request",
    "session_ended_request",
    "set_extra_feature",
    "set_locale",
    "test",
]

_DEFAULT: Harness | None = None


def default_harness() -> Harness:
    """Process-wide harness backing the module-level helpers."""

    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = Harness()
    return _DEFAULT


def initialize(index: Any, app_id: str, user_id: str) -> None:
    default_harness().initialize(index, app_id, user_id)


def set_locale(locale: str) -> None:
    default_harness().set_locale(locale)


def set_extra_feature(key: str, enabled: bool) -> None:
    default_harness().set_extra_feature(key, enabled)


def launch_request(locale: str | None = None) -> RequestEnvelope:
    return default_harness().launch_request(locale)


def intent_request(intent_name: str, slots: Mapping[str, Any] | None = None, locale: str | None = None) -> RequestEnvelope:
    return default_harness().intent_request(intent_name, slots, locale)


def session_ended_request(
    reason: SessionEndedReason | str = SessionEndedReason.USER_INITIATED,
    error: SessionEndedError | None = None,
    locale: str | None = None,
) -> RequestEnvelope:
    return default_harness().session_ended_request(reason, error, locale)


def test(sequence: Iterable[Step | Mapping[str, Any]] | None, *, name: str = "returns the correct responses") -> Callable[[], None]:
    return default_harness().test(sequence, name=name)


# Keep pytest from collecting the helper when users star-import it.
test.__test__ = False  # type: ignore[attr-defined]
