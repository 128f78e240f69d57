# formstate/runtime/submission.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Tuple

from formstate.core.config import FormConfig
from formstate.core.engine import ValidationEngine
from formstate.core.errors import ReentrantSubmissionError
from formstate.interfaces.protocols import PresentationAdapter
from formstate.interfaces.types import ReadinessCallback
from formstate.runtime.presentation import render_outcome

logger = logging.getLogger(__name__)

IDLE_TRIGGER_TEXT = "Register"
SUBMITTING_TRIGGER_TEXT = "Submitting..."
SUMMARY_HEADING = "Registration complete!"


class SubmissionState(Enum):
    """Defines the possible states of the submission state machine."""

    IDLE = auto()  # Ready to accept a submit
    SUBMITTING = auto()  # A submission cycle is in flight


@dataclass(frozen=True)
class SubmissionSummary:
    """Labeled values of every rule-governed field, in registration order."""

    entries: Tuple[Tuple[str, str], ...]
    values: Dict[str, str] = field(default_factory=dict)

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.entries]

    @property
    def text(self) -> str:
        lines = "\n".join(f"{label}: {value}" for label, value in self.entries)
        return f"{SUMMARY_HEADING}\n\n{lines}"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class SubmissionResult:
    """
    Outcome of one submission cycle.

    Attributes:
        submitted: True when every field passed and the simulated work ran.
        summary: The success summary, only on submitted cycles.
        failed_fields: Fields that failed re-validation, only on rejected cycles.
    """

    submitted: bool
    summary: Optional[SubmissionSummary] = None
    failed_fields: Tuple[str, ...] = ()


class SubmissionStateMachine:
    """
    Two-state machine (IDLE, SUBMITTING) orchestrating form submission.

    A submit while SUBMITTING is ignored, so rapid repeated triggers produce a
    single cycle. With ``strict`` set it raises ReentrantSubmissionError
    instead. Every cycle re-validates all registered fields bypassing the
    validity cache, runs the simulated work only when all pass, and always
    returns to IDLE with the trigger re-enabled and readiness re-derived.
    """

    def __init__(
        self,
        engine: ValidationEngine,
        adapter: PresentationAdapter,
        config: Optional[FormConfig] = None,
        on_idle: Optional[ReadinessCallback] = None,
        on_reset: Optional[Callable[[], None]] = None,
        strict: bool = False,
    ) -> None:
        """
        :param engine: Validation engine owning the validity cache.
        :param adapter: Presentation collaborator.
        :param config: Engine configuration; defaults apply when omitted.
        :param on_idle: Readiness re-check run whenever a cycle ends.
        :param on_reset: Extra work run after the form has been reset.
        :param strict: Raise on a submit attempted while one is in flight
                       instead of ignoring it.
        """
        self._engine = engine
        self._adapter = adapter
        self._config = config or FormConfig()
        self._on_idle = on_idle
        self._on_reset = on_reset
        self._strict = strict
        self._state = SubmissionState.IDLE
        self._completed_cycles = 0

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def completed_cycles(self) -> int:
        """Number of submission cycles that ran to completion, either path."""
        return self._completed_cycles

    async def submit(self) -> Optional[SubmissionResult]:
        """
        Run one submission cycle.

        :return: The cycle's result, or None if a cycle was already in flight.
        :raises ReentrantSubmissionError: If a cycle is in flight and the
                                          machine is strict.
        """
        if self._state is SubmissionState.SUBMITTING:
            if self._strict:
                raise ReentrantSubmissionError("A submission is already in flight")
            logger.debug("Submit ignored: a submission is already in flight")
            return None

        self._state = SubmissionState.SUBMITTING
        self._adapter.set_trigger_enabled(False)
        self._adapter.set_trigger_text(SUBMITTING_TRIGGER_TEXT)
        try:
            failed = self._revalidate_all()
            if failed:
                logger.info("Submission rejected; invalid fields: %s", ", ".join(failed))
                return SubmissionResult(submitted=False, failed_fields=tuple(failed))

            values = self._collect_values()
            await asyncio.sleep(self._config.submit_delay)
            summary = self._summarize(values)
            self._adapter.show_summary(summary)
            logger.info("Submission completed with %d fields", len(summary.entries))
            self.reset_form()
            return SubmissionResult(submitted=True, summary=summary)
        finally:
            self._state = SubmissionState.IDLE
            self._completed_cycles += 1
            self._adapter.set_trigger_enabled(True)
            self._adapter.set_trigger_text(IDLE_TRIGGER_TEXT)
            await self._notify_idle()

    def reset_form(self) -> None:
        """Return every registered field to its untouched state and drop all cached verdicts."""
        for field_id in self._engine.registry.field_ids():
            self._adapter.reset_field(field_id)
        self._engine.reset()
        if self._on_reset is not None:
            self._on_reset()

    def _revalidate_all(self) -> List[str]:
        failed: List[str] = []
        for field_id in self._engine.registry.field_ids():
            raw_value = self._adapter.get_value(field_id)
            if raw_value is None:
                continue
            outcome = self._engine.validate_field(field_id, raw_value, force=True)
            render_outcome(self._adapter, field_id, outcome)
            if not outcome.is_valid:
                failed.append(field_id)
        return failed

    def _collect_values(self) -> Dict[str, str]:
        values: Dict[str, str] = {}
        for field_id in self._engine.registry.field_ids():
            raw_value = self._adapter.get_value(field_id)
            if raw_value is not None:
                values[field_id] = raw_value
        return values

    def _summarize(self, values: Dict[str, str]) -> SubmissionSummary:
        entries = []
        for rule in self._engine.registry:
            if rule.field_id in values:
                entries.append((rule.label, values[rule.field_id]))
        return SubmissionSummary(entries=tuple(entries), values=dict(values))

    async def _notify_idle(self) -> None:
        if self._on_idle is None:
            return
        result = self._on_idle()
        if inspect.isawaitable(result):
            await result
