"""Per-step context handed to custom callbacks."""

from __future__ import annotations

from typing import Any, NoReturn

from skillcheck.errors import ExpectationViolation, MalformedResponseError, NotInitializedError
from skillcheck.i18n import Translator
from skillcheck.types import Failure


class StepContext:
    """Failure and translation helpers scoped to one step of a sequence."""

    def __init__(
        self,
        sequence_index: int,
        locale: str,
        request_type: str,
        *,
        translator: Translator | None = None,
    ) -> None:
        self.sequence_index = sequence_index
        self.locale = locale
        self.request_type = request_type
        self._translator = translator

    @property
    def label(self) -> str:
        return f"Request #{self.sequence_index + 1} ({self.request_type})"

    def t(self, keys: str | list[str], *args: Any, **params: Any) -> Any:
        """Translate using the locale the step's request was built with."""

        if self._translator is None:
            raise NotInitializedError("i18n is not initialized. You must call 'initialize_i18n' before calling 't'.")
        params.setdefault("lng", self.locale)
        return self._translator.t(keys, *args, **params)

    def fail(self, failure: Failure | None = None, /, **data: Any) -> NoReturn:
        """Raise an ExpectationViolation labelled with this step.

        Accepts a Failure or its fields as keyword arguments
        (message, expected, actual, operator, show_diff).
        """

        if failure is None:
            failure = Failure(**data)
        raise self._violation(ExpectationViolation, failure)

    def fail_malformed(self, detail: str) -> NoReturn:
        failure = Failure(message=f"the handler returned a malformed response: {detail}")
        raise self._violation(MalformedResponseError, failure)

    def _violation(self, kind: type[ExpectationViolation], failure: Failure) -> ExpectationViolation:
        message = self.label
        if failure.message:
            message += f": {failure.message}"
        return kind(
            message,
            expected=failure.expected,
            actual=failure.actual,
            operator=failure.operator,
            show_diff=failure.show_diff,
            generated_message=False,
        )
