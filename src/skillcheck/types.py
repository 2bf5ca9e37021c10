"""Framework-neutral data aliases and result records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

type Event = dict[str, Any]
type SessionState = dict[str, Any]


@dataclass(frozen=True)
class Failure:
    """Structured description of one violated expectation."""

    message: str = ""
    expected: Any = None
    actual: Any = None
    operator: str | None = None
    show_diff: bool = False


@dataclass(frozen=True)
class ResponseFacets:
    """Observable parts of one skill response."""

    speech: str | None
    reprompt: str | None
    ends_session: bool


@dataclass(frozen=True)
class StepRecord:
    """What one passing step sent and received."""

    index: int
    request_type: str
    facets: ResponseFacets
    response: Any


@dataclass(frozen=True)
class SequenceReport:
    """Result of a fully replayed sequence."""

    steps: list[StepRecord] = field(default_factory=list)
    session_state: SessionState = field(default_factory=dict)

    @property
    def invocations(self) -> int:
        return len(self.steps)
