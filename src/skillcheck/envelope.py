"""Utilities for reading and normalizing skill response envelopes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from skillcheck.types import ResponseFacets, SessionState


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class OutputSpeech(_Model):
    type: str = "SSML"
    ssml: str | None = None
    text: str | None = None

    @property
    def content(self) -> str | None:
        if self.ssml is not None:
            return self.ssml
        return self.text


class Reprompt(_Model):
    output_speech: OutputSpeech | None = None


class ResponseBody(_Model):
    output_speech: OutputSpeech | None = None
    reprompt: Reprompt | None = None
    should_end_session: bool | None = None


class SkillResponse(_Model):
    """One handler response, with absent parts kept as None."""

    version: str | None = None
    response: ResponseBody
    session_attributes: dict[str, Any] | None = None


class MalformedResponse(ValueError):
    """Raised when a value cannot be read as a skill response."""


def parse_response(raw: Any) -> SkillResponse:
    """Validate a handler result into a SkillResponse."""

    if isinstance(raw, SkillResponse):
        return raw
    if not isinstance(raw, Mapping) and hasattr(raw, "__dict__"):
        raw = vars(raw)
    try:
        return SkillResponse.model_validate(raw)
    except ValidationError as exc:
        raise MalformedResponse(str(exc)) from exc


def extract_facets(response: SkillResponse) -> ResponseFacets:
    """Pull speech, reprompt and the session flag out of a response."""

    body = response.response
    speech = body.output_speech.content if body.output_speech is not None else None
    reprompt = None
    if body.reprompt is not None and body.reprompt.output_speech is not None:
        reprompt = body.reprompt.output_speech.content
    return ResponseFacets(speech=speech, reprompt=reprompt, ends_session=bool(body.should_end_session))


def carried_state(response: SkillResponse) -> SessionState:
    """Session attributes the response hands to the next request."""

    if response.session_attributes is None:
        return {}
    return response.session_attributes
