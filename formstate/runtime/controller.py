# formstate/runtime/controller.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, Optional

import httpx

from formstate.core.config import FormConfig
from formstate.core.engine import ValidationEngine
from formstate.core.outcomes import ValidationOutcome
from formstate.core.registry import RuleRegistry, default_registry
from formstate.core.rules import format_for_display
from formstate.interfaces.protocols import PresentationAdapter
from formstate.runtime.debounce import Debouncer
from formstate.runtime.loader import OptionList, OptionLoader
from formstate.runtime.presentation import render_outcome
from formstate.runtime.submission import SubmissionResult, SubmissionState, SubmissionStateMachine

logger = logging.getLogger(__name__)


class FormController:
    """
    Wires user interaction events into the engine.

    Input events are debounced per field; blur and change validate
    immediately. Every validation is rendered through the adapter and followed
    by a submission-readiness re-check. The controller owns one engine, one
    option loader and one submission state machine for its form.
    """

    def __init__(
        self,
        adapter: PresentationAdapter,
        registry: Optional[RuleRegistry] = None,
        config: Optional[FormConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        """
        :param adapter: Presentation collaborator holding the form's fields.
        :param registry: Rules to enforce; the registration form rules when omitted.
        :param config: Engine configuration; defaults apply when omitted.
        :param client: HTTP client handed to the option loader.
        :param clock: Reference date source for date rules.
        """
        self._adapter = adapter
        self._config = config or FormConfig()
        self._engine = ValidationEngine(registry or default_registry(), clock=clock)
        self._loader = OptionLoader(adapter, self._config, client=client, on_complete=self.check_ready)
        self._submission = SubmissionStateMachine(
            self._engine,
            adapter,
            self._config,
            on_idle=self.check_ready,
            on_reset=self.cancel_pending,
        )
        self._debouncers: Dict[str, Debouncer] = {}

    @property
    def engine(self) -> ValidationEngine:
        return self._engine

    @property
    def loader(self) -> OptionLoader:
        return self._loader

    @property
    def submission(self) -> SubmissionStateMachine:
        return self._submission

    @property
    def config(self) -> FormConfig:
        return self._config

    async def start(self) -> Optional[OptionList]:
        """Derive initial readiness, then load the remote options."""
        self.check_ready()
        return await self._loader.load_options()

    def on_input(self, field_id: str, value: Optional[str] = None) -> None:
        """
        Handle an input event. Numeric fields are re-formatted on the spot;
        validation is debounced.

        :param field_id: Field receiving input.
        :param value: New raw value, written to the field first when given.
        """
        if value is not None:
            self._adapter.set_value(field_id, value)
        raw_value = self._adapter.get_value(field_id) or ""

        rule = self._engine.registry.get_rule(field_id)
        if rule is not None and rule.format_on_input:
            formatted = format_for_display(rule, raw_value)
            if formatted != raw_value:
                self._adapter.set_value(field_id, formatted)
            raw_value = formatted

        self._adapter.set_filled(field_id, raw_value.strip() != "")
        self._debouncer_for(field_id).trigger(field_id, raw_value)

    def on_blur(self, field_id: str) -> ValidationOutcome:
        """Validate a field the user is leaving, bypassing the debounce delay."""
        self._cancel_field(field_id)
        outcome = self.validate(field_id)
        if (self._adapter.get_value(field_id) or "").strip() == "":
            self._adapter.set_filled(field_id, False)
        self.check_ready()
        return outcome

    def on_change(self, field_id: str, value: Optional[str] = None) -> ValidationOutcome:
        """Validate a discrete change (select, date picker) immediately."""
        if value is not None:
            self._adapter.set_value(field_id, value)
        self._cancel_field(field_id)
        outcome = self.validate(field_id)
        self.check_ready()
        return outcome

    def on_focus(self, field_id: str) -> None:
        """Clear a field's error and cached verdict while the user edits it."""
        self._adapter.clear_error(field_id)
        self._engine.invalidate(field_id)
        self._adapter.set_filled(field_id, True)

    def validate(self, field_id: str, raw_value: Optional[str] = None) -> ValidationOutcome:
        """
        Validate and render one field.

        :param raw_value: Value to validate; the field's current value when omitted.
        """
        if raw_value is None:
            raw_value = self._adapter.get_value(field_id)
        outcome = self._engine.validate_field(field_id, raw_value)
        if field_id in self._engine.registry:
            render_outcome(self._adapter, field_id, outcome)
        return outcome

    def check_ready(self) -> bool:
        """
        Re-derive overall validity and enable the submit trigger accordingly.
        The trigger is left alone while a submission is in flight.
        """
        ready = self._engine.overall_valid(self._adapter.get_value)
        if self._submission.state is SubmissionState.IDLE:
            self._adapter.set_trigger_enabled(ready)
        return ready

    async def submit(self) -> Optional[SubmissionResult]:
        return await self._submission.submit()

    def reset(self) -> None:
        """Clear every field, its cached verdict and its visual state."""
        self._submission.reset_form()
        self.check_ready()

    def cancel_pending(self) -> None:
        """Cancel every pending debounced validation."""
        for debouncer in self._debouncers.values():
            debouncer.cancel()

    async def close(self) -> None:
        self.cancel_pending()
        for debouncer in self._debouncers.values():
            await debouncer.wait()

    def _debouncer_for(self, field_id: str) -> Debouncer:
        debouncer = self._debouncers.get(field_id)
        if debouncer is None:
            debouncer = Debouncer(self._on_debounced_input, self._config.debounce_ms)
            self._debouncers[field_id] = debouncer
        return debouncer

    def _cancel_field(self, field_id: str) -> None:
        debouncer = self._debouncers.get(field_id)
        if debouncer is not None:
            debouncer.cancel()

    def _on_debounced_input(self, field_id: str, raw_value: str) -> None:
        logger.debug("Validating %r after input settled", field_id)
        self.validate(field_id, raw_value)
        self.check_ready()
