"""Application-level exception types for skillcheck."""

from __future__ import annotations

from typing import Any


class SkillCheckError(Exception):
    """Base exception for skillcheck."""


class ConfigurationError(SkillCheckError):
    """Base exception for harness setup and argument errors."""


class NotInitializedError(ConfigurationError):
    """Raised when the harness or localization is used before initialization."""


class MissingArgumentError(ConfigurationError):
    """Raised when a required argument is missing or empty."""


class UnknownFeatureError(ConfigurationError):
    """Raised when toggling a feature key that is not registered."""


class ContradictoryExpectationError(ConfigurationError):
    """Raised when a step declares both members of an exclusive expectation pair."""


class InvocationError(SkillCheckError):
    """Base exception for invocation sandbox failures."""


class InvocationTimeoutError(InvocationError):
    """Raised when a handler does not complete within the invocation timeout."""


class ContextAlreadyCompletedError(InvocationError):
    """Raised when a one-shot invocation context is completed twice."""


class ExpectationViolation(AssertionError):
    """A failed expectation for one step of a sequence."""

    def __init__(
        self,
        message: str,
        *,
        expected: Any = None,
        actual: Any = None,
        operator: str | None = None,
        show_diff: bool = False,
        generated_message: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.expected = expected
        self.actual = actual
        self.operator = operator
        self.show_diff = show_diff
        self.generated_message = generated_message

    def __str__(self) -> str:
        if not self.show_diff and self.expected is None and self.actual is None:
            return self.message
        return f"{self.message}\n  expected: {self.expected!r}\n  actual:   {self.actual!r}"


class MalformedResponseError(ExpectationViolation):
    """Raised when a handler resolves to something that is not a skill response."""
