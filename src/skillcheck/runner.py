"""Sequential replay of a scripted conversation against a skill handler."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from skillcheck.conformance import ConformanceChecks, ExtraFeatures
from skillcheck.context import StepContext
from skillcheck.envelope import MalformedResponse, SkillResponse, carried_state, extract_facets, parse_response
from skillcheck.errors import ExpectationViolation
from skillcheck.expectations import Step, evaluate_expectations, normalize_sequence
from skillcheck.i18n import Translator
from skillcheck.sandbox import Handler, invoke
from skillcheck.types import SequenceReport, SessionState, StepRecord


class SequenceRunner:
    """Replay steps one at a time, threading session state between them."""

    def __init__(
        self,
        handler: Handler,
        *,
        checks: ConformanceChecks,
        features: ExtraFeatures,
        timeout_seconds: float,
        translator: Translator | None = None,
    ) -> None:
        self._handler = handler
        self._checks = checks
        self._features = features
        self._timeout_seconds = timeout_seconds
        self._translator = translator

    async def run(self, sequence: Iterable[Step | Mapping[str, Any]]) -> SequenceReport:
        """Run every step in order; the first violation or handler error propagates."""

        steps = normalize_sequence(sequence)
        state: SessionState = {}
        records: list[StepRecord] = []
        logger.info("sequence.start steps={}", len(steps))

        for index, step in enumerate(steps):
            context = StepContext(index, step.request.locale, step.request.kind, translator=self._translator)
            with logger.contextualize(step=context.label):
                try:
                    response = await self._run_step(step, state, context)
                except ExpectationViolation as exc:
                    logger.warning("sequence.failed step={} reason={}", index + 1, exc.message)
                    raise
                except Exception:
                    logger.opt(exception=True).warning("sequence.error step={}", index + 1)
                    raise
            records.append(
                StepRecord(index=index, request_type=context.request_type, facets=extract_facets(response), response=response)
            )
            state = carried_state(response)

        logger.info("sequence.done steps={}", len(steps))
        return SequenceReport(steps=records, session_state=state)

    async def _run_step(self, step: Step, state: SessionState, context: StepContext) -> SkillResponse:
        event = step.request.to_event(state, new=context.sequence_index == 0)
        logger.debug("sequence.step index={} kind={}", context.sequence_index, context.request_type)
        raw = await invoke(self._handler, event, timeout_seconds=self._timeout_seconds)

        try:
            response = parse_response(raw)
        except MalformedResponse as exc:
            context.fail_malformed(str(exc))
        facets = extract_facets(response)

        failures = evaluate_expectations(step, facets)
        if failures:
            context.fail(failures[0])

        if step.says_callback is not None:
            step.says_callback(context, facets.speech)
        if step.callback is not None:
            step.callback(context, response)

        failure = self._checks.first_failure(self._features, facets=facets, response=response)
        if failure is not None:
            context.fail(failure)
        return response
