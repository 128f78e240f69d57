# formstate/runtime/presentation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from formstate.core.outcomes import ValidationOutcome
from formstate.interfaces.protocols import PresentationAdapter

if TYPE_CHECKING:
    from formstate.runtime.submission import SubmissionSummary

logger = logging.getLogger(__name__)


def render_outcome(adapter: PresentationAdapter, field_id: str, outcome: ValidationOutcome) -> None:
    """Render a verdict: valid clears the field's error, invalid shows its message."""
    if outcome.is_valid:
        adapter.clear_error(field_id)
    else:
        adapter.show_error(field_id, outcome.message or "")


class MemoryPresentation:
    """
    Dict-backed PresentationAdapter. Holds field values, rendered errors and
    trigger state in memory and records every call, so the engine can run
    headless.
    """

    VALID = "valid"
    INVALID = "invalid"

    def __init__(self, field_ids: Iterable[str] = (), values: Optional[Mapping[str, str]] = None) -> None:
        """
        :param field_ids: Fields present on the form, initially empty.
        :param values: Initial values; their keys are added to the form too.
        """
        self.values: Dict[str, str] = {field_id: "" for field_id in field_ids}
        self.values.update(values or {})
        self.errors: Dict[str, str] = {}
        self.marks: Dict[str, str] = {}
        self.filled: Set[str] = set()
        self.disabled_controls: Set[str] = set()
        self.options: Dict[str, List[str]] = {}
        self.trigger_enabled = True
        self.trigger_text = ""
        self.summaries: List["SubmissionSummary"] = []
        self.calls: List[Tuple[str, tuple]] = []

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))

    def calls_to(self, name: str) -> List[tuple]:
        """Arguments of every recorded call to ``name``."""
        return [args for call, args in self.calls if call == name]

    def get_value(self, field_id: str) -> Optional[str]:
        return self.values.get(field_id)

    def set_value(self, field_id: str, value: str) -> None:
        self._record("set_value", field_id, value)
        self.values[field_id] = value

    def show_error(self, field_id: str, message: str) -> None:
        self._record("show_error", field_id, message)
        self.errors[field_id] = message
        self.marks[field_id] = self.INVALID

    def clear_error(self, field_id: str) -> None:
        self._record("clear_error", field_id)
        self.errors.pop(field_id, None)
        self.marks[field_id] = self.VALID

    def reset_field(self, field_id: str) -> None:
        self._record("reset_field", field_id)
        if field_id in self.values:
            self.values[field_id] = ""
        self.errors.pop(field_id, None)
        self.marks.pop(field_id, None)
        self.filled.discard(field_id)

    def set_filled(self, field_id: str, filled: bool) -> None:
        self._record("set_filled", field_id, filled)
        if filled:
            self.filled.add(field_id)
        else:
            self.filled.discard(field_id)

    def set_trigger_enabled(self, enabled: bool) -> None:
        self._record("set_trigger_enabled", enabled)
        self.trigger_enabled = enabled

    def set_trigger_text(self, text: str) -> None:
        self._record("set_trigger_text", text)
        self.trigger_text = text

    def set_control_enabled(self, field_id: str, enabled: bool) -> None:
        self._record("set_control_enabled", field_id, enabled)
        if enabled:
            self.disabled_controls.discard(field_id)
        else:
            self.disabled_controls.add(field_id)

    def set_options(self, field_id: str, placeholder: str, options: Sequence[str]) -> None:
        self._record("set_options", field_id, placeholder, tuple(options))
        self.options[field_id] = [placeholder, *options]
        self.values.setdefault(field_id, "")

    def option_count(self, field_id: str) -> int:
        return len(self.options.get(field_id, []))

    def show_summary(self, summary: "SubmissionSummary") -> None:
        self._record("show_summary", summary)
        self.summaries.append(summary)
        logger.info("%s", summary.text)
