"""Request envelope models and builders for each interaction kind."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skillcheck.types import Event, SessionState

REQUEST_ID_PREFIX = "EdwRequestId."
SESSION_ID_PREFIX = "SessionId."


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SessionEndedReason(StrEnum):
    USER_INITIATED = "USER_INITIATED"
    ERROR = "ERROR"
    EXCEEDED_MAX_REPROMPTS = "EXCEEDED_MAX_REPROMPTS"


class SessionEndedErrorType(StrEnum):
    INVALID_RESPONSE = "INVALID_RESPONSE"
    DEVICE_COMMUNICATION_ERROR = "DEVICE_COMMUNICATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class Application(_Model):
    application_id: str | None = None


class User(_Model):
    user_id: str | None = None


class SessionData(_Model):
    session_id: str
    application: Application
    attributes: dict[str, Any] = Field(default_factory=dict)
    user: User
    new: bool = True


class Slot(_Model):
    name: str
    value: Any = None


class Intent(_Model):
    name: str
    slots: dict[str, Slot] = Field(default_factory=dict)


class SessionEndedError(_Model):
    type: SessionEndedErrorType
    message: str = ""


class _RequestBody(_Model):
    request_id: str
    timestamp: str
    locale: str


class LaunchRequest(_RequestBody):
    type: Literal["LaunchRequest"] = "LaunchRequest"


class IntentRequest(_RequestBody):
    type: Literal["IntentRequest"] = "IntentRequest"
    intent: Intent


class SessionEndedRequest(_RequestBody):
    type: Literal["SessionEndedRequest"] = "SessionEndedRequest"
    reason: SessionEndedReason = SessionEndedReason.USER_INITIATED
    error: SessionEndedError | None = None


RequestBody = Annotated[LaunchRequest | IntentRequest | SessionEndedRequest, Field(discriminator="type")]


class RequestEnvelope(_Model):
    """One complete request as delivered to a skill handler."""

    version: str
    session: SessionData
    request: RequestBody

    @property
    def kind(self) -> str:
        """Human-readable request label: the intent name for intents, else the request type."""

        if isinstance(self.request, IntentRequest):
            return self.request.intent.name
        return self.request.type

    @property
    def locale(self) -> str:
        return self.request.locale

    def to_event(self, attributes: SessionState | None = None, *, new: bool | None = None) -> Event:
        """Serialize to the wire shape, injecting a private copy of the session attributes."""

        event = self.model_dump(mode="json", by_alias=True)
        if "error" in event["request"] and event["request"]["error"] is None:
            del event["request"]["error"]
        event["session"]["attributes"] = copy.deepcopy(attributes) if attributes is not None else {}
        if new is not None:
            event["session"]["new"] = new
        return event


def normalize_slots(slots: Mapping[str, Any] | None) -> dict[str, Slot]:
    """Convert `name -> value` pairs into slot records keyed by slot name."""

    if not slots:
        return {}
    return {name: Slot(name=name, value=value) for name, value in slots.items()}


def new_request_id() -> str:
    return f"{REQUEST_ID_PREFIX}{uuid.uuid4()}"


def new_session_id() -> str:
    return f"{SESSION_ID_PREFIX}{uuid.uuid4()}"


def current_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RequestBuilder:
    """Build request envelopes stamped with the harness identity and locale."""

    def __init__(
        self,
        *,
        version: str,
        locale: str,
        application_id: str | None = None,
        user_id: str | None = None,
        session_id: str | None = None,
    ) -> None:
        self.version = version
        self.locale = locale
        self.application_id = application_id
        self.user_id = user_id
        self.session_id = session_id or new_session_id()

    def launch(self, locale: str | None = None) -> RequestEnvelope:
        body = LaunchRequest(**self._body_fields(locale))
        return self._envelope(body)

    def intent(
        self,
        name: str,
        slots: Mapping[str, Any] | None = None,
        locale: str | None = None,
    ) -> RequestEnvelope:
        body = IntentRequest(intent=Intent(name=name, slots=normalize_slots(slots)), **self._body_fields(locale))
        return self._envelope(body)

    def session_ended(
        self,
        reason: SessionEndedReason | str = SessionEndedReason.USER_INITIATED,
        error: SessionEndedError | None = None,
        locale: str | None = None,
    ) -> RequestEnvelope:
        body = SessionEndedRequest(reason=SessionEndedReason(reason), error=error, **self._body_fields(locale))
        return self._envelope(body)

    def _body_fields(self, locale: str | None) -> dict[str, str]:
        return {
            "request_id": new_request_id(),
            "timestamp": current_timestamp(),
            "locale": locale or self.locale,
        }

    def _session(self) -> SessionData:
        return SessionData(
            session_id=self.session_id,
            application=Application(application_id=self.application_id),
            user=User(user_id=self.user_id),
        )

    def _envelope(self, body: LaunchRequest | IntentRequest | SessionEndedRequest) -> RequestEnvelope:
        return RequestEnvelope(version=self.version, session=self._session(), request=body)
