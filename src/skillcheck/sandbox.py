"""One-shot invocation sandbox for skill handlers."""

from __future__ import annotations

import asyncio
import inspect
import time
import uuid
from collections.abc import Callable
from typing import Any

from loguru import logger

from skillcheck.errors import ContextAlreadyCompletedError, InvocationError, InvocationTimeoutError
from skillcheck.types import Event

type Handler = Callable[[Event, LambdaContext], Any]


class LambdaContext:
    """Lambda-style context whose completion resolves exactly one invocation."""

    def __init__(
        self,
        *,
        timeout_seconds: float,
        function_name: str = "skill",
        function_version: str = "$LATEST",
        memory_limit_in_mb: int = 128,
    ) -> None:
        self.function_name = function_name
        self.function_version = function_version
        self.memory_limit_in_mb = memory_limit_in_mb
        self.aws_request_id = str(uuid.uuid4())
        self.invoked_function_arn = f"arn:aws:lambda:us-east-1:000000000000:function:{function_name}:{function_version}"
        self.log_group_name = f"/aws/lambda/{function_name}"
        self.log_stream_name = self.aws_request_id
        self._deadline = time.monotonic() + timeout_seconds
        self._future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

    @property
    def completed(self) -> bool:
        return self._future.done()

    @property
    def future(self) -> asyncio.Future[Any]:
        return self._future

    def get_remaining_time_in_millis(self) -> int:
        return max(0, int((self._deadline - time.monotonic()) * 1000))

    def remaining_seconds(self) -> float:
        return max(0.0, self._deadline - time.monotonic())

    def succeed(self, result: Any = None) -> None:
        self._complete()
        self._future.set_result(result)

    def fail(self, error: BaseException | str) -> None:
        self._complete()
        if not isinstance(error, BaseException):
            error = InvocationError(str(error))
        self._future.set_exception(error)

    def done(self, error: BaseException | str | None = None, result: Any = None) -> None:
        if error is not None:
            self.fail(error)
        else:
            self.succeed(result)

    def _complete(self) -> None:
        if self._future.done():
            raise ContextAlreadyCompletedError(f"invocation {self.aws_request_id} was already completed")


async def invoke(handler: Handler, event: Event, *, timeout_seconds: float) -> Any:
    """Run one handler call and resolve to its response.

    The handler may return the response, return an awaitable of it, or
    complete through ``context.succeed``/``fail``/``done``. Exceptions the
    handler raises propagate unchanged.
    """

    context = LambdaContext(timeout_seconds=timeout_seconds)
    logger.debug("sandbox.invoke request_id={}", context.aws_request_id)
    outcome = handler(event, context)
    try:
        async with asyncio.timeout(context.remaining_seconds()) as scope:
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if outcome is not None and not context.completed:
                context.succeed(outcome)
            return await context.future
    except TimeoutError as exc:
        if not scope.expired():
            raise
        raise InvocationTimeoutError(f"handler did not complete within {timeout_seconds} seconds") from exc
