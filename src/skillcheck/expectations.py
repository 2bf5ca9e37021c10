"""Per-step expectations and their evaluation against response facets."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from pydantic.alias_generators import to_snake

from skillcheck.errors import ConfigurationError, ContradictoryExpectationError, MissingArgumentError
from skillcheck.request_builder import RequestEnvelope
from skillcheck.types import Failure, ResponseFacets

if TYPE_CHECKING:
    from skillcheck.context import StepContext
    from skillcheck.envelope import SkillResponse

SPEAK_OPEN = "<speak> "
SPEAK_CLOSE = " </speak>"

type SaysCallback = Callable[[StepContext, str | None], None]
type ResponseCallback = Callable[[StepContext, SkillResponse], None]


def wrap_speech(text: str) -> str:
    """Wrap literal text in the SSML envelope produced by skill responses."""

    return f"{SPEAK_OPEN}{text}{SPEAK_CLOSE}"


@dataclass(frozen=True)
class Step:
    """One request plus what its response must look like."""

    request: RequestEnvelope
    says: str | None = None
    says_nothing: bool = False
    reprompts: str | None = None
    reprompts_nothing: bool = False
    should_end_session: bool | None = None
    says_callback: SaysCallback | None = None
    callback: ResponseCallback | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.request, RequestEnvelope):
            raise MissingArgumentError("'request' must be a request built by the harness.")
        if self.says is not None and self.says_nothing:
            raise ContradictoryExpectationError("A step cannot declare both 'says' and 'says_nothing'.")
        if self.reprompts is not None and self.reprompts_nothing:
            raise ContradictoryExpectationError("A step cannot declare both 'reprompts' and 'reprompts_nothing'.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Step:
        """Build a step from snake_case or camelCase keys."""

        known = {item.name for item in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = to_snake(key)
            if name not in known:
                raise ConfigurationError(f"Unknown step field '{key}'.")
            kwargs[name] = value
        if "request" not in kwargs:
            raise MissingArgumentError("'request' must be provided for every step.")
        return cls(**kwargs)


def normalize_sequence(sequence: Iterable[Step | Mapping[str, Any]] | None) -> tuple[Step, ...]:
    """Freeze a sequence into steps, validating each one up front."""

    if sequence is None:
        raise MissingArgumentError("'sequence' argument must be provided.")
    return tuple(item if isinstance(item, Step) else Step.from_mapping(item) for item in sequence)


def evaluate_expectations(step: Step, facets: ResponseFacets) -> list[Failure]:
    """Return failures for the declared expectations, in a fixed order."""

    failures: list[Failure] = []
    if step.says is not None:
        failures.extend(_string_equal("speech", facets.speech, wrap_speech(step.says)))
    if step.says_nothing:
        failures.extend(_string_missing("speech", facets.speech))
    if step.reprompts is not None:
        failures.extend(_string_equal("reprompt", facets.reprompt, wrap_speech(step.reprompts)))
    if step.reprompts_nothing:
        failures.extend(_string_missing("reprompt", facets.reprompt))

    if step.should_end_session is True and not facets.ends_session:
        failures.append(
            Failure(
                message="the response did not end the session",
                expected="the response ends the session",
                actual="the response did not end the session",
            )
        )
    elif step.should_end_session is False and facets.ends_session:
        failures.append(
            Failure(
                message="the response ended the session",
                expected="the response does not end the session",
                actual="the response ended the session",
            )
        )
    return failures


def _string_equal(name: str, actual: str | None, expected: str) -> list[Failure]:
    if actual == expected:
        return []
    return [
        Failure(
            message=f"the response did not return the correct {name} value",
            expected=expected,
            actual=actual,
            operator="==",
            show_diff=True,
        )
    ]


def _string_missing(name: str, actual: str | None) -> list[Failure]:
    if actual is None:
        return []
    return [
        Failure(
            message=f"the response unexpectedly returned a {name} value",
            expected=None,
            actual=actual,
            operator="==",
            show_diff=True,
        )
    ]
