# formstate/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

from formstate.interfaces.types import FieldID

if TYPE_CHECKING:
    from formstate.runtime.submission import SubmissionSummary


@runtime_checkable
class PresentationAdapter(Protocol):
    """
    Presentation protocol the engine renders through.

    Methods:
        get_value(field_id): Current raw value of a field, None if absent.
        set_value(field_id, value): Replace a field's displayed value.
        show_error(field_id, message): Render a field as invalid.
        clear_error(field_id): Render a field as valid, removing its error.
        reset_field(field_id): Return a field to its untouched state.
        set_filled(field_id, filled): Toggle the "has a value" decoration.
        set_trigger_enabled(enabled): Enable or disable the submit trigger.
        set_trigger_text(text): Update the submit trigger's status text.
        set_control_enabled(field_id, enabled): Enable or disable a control.
        set_options(field_id, placeholder, options): Replace a select's options.
        option_count(field_id): Number of options a select holds, placeholder included.
        show_summary(summary): Report a completed submission.

    Runtime Invariants:
    - Calls never raise for fields the adapter knows about.
    - Rendering never alters the engine's validity cache.
    """

    def get_value(self, field_id: FieldID) -> Optional[str]:
        ...

    def set_value(self, field_id: FieldID, value: str) -> None:
        ...

    def show_error(self, field_id: FieldID, message: str) -> None:
        ...

    def clear_error(self, field_id: FieldID) -> None:
        ...

    def reset_field(self, field_id: FieldID) -> None:
        ...

    def set_filled(self, field_id: FieldID, filled: bool) -> None:
        ...

    def set_trigger_enabled(self, enabled: bool) -> None:
        ...

    def set_trigger_text(self, text: str) -> None:
        ...

    def set_control_enabled(self, field_id: FieldID, enabled: bool) -> None:
        ...

    def set_options(self, field_id: FieldID, placeholder: str, options: Sequence[str]) -> None:
        """Replace the options of a select control: a placeholder entry followed by ``options``."""
        ...

    def option_count(self, field_id: FieldID) -> int:
        ...

    def show_summary(self, summary: "SubmissionSummary") -> None:
        ...
