# formstate/core/outcomes.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from formstate.core.errors import FieldValidationError


class ValidationOutcome:
    """
    Verdict of evaluating a rule against a normalized value. Exactly two
    variants exist, Valid and Invalid, and every rule reports through them.
    """

    @property
    def is_valid(self) -> bool:
        raise NotImplementedError()

    @property
    def message(self) -> Optional[str]:
        """The failure message, or None for a valid outcome."""
        return None

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_for_invalid(self, field_id: Optional[str] = None) -> None:
        """
        Raise FieldValidationError when this outcome is Invalid.

        :param field_id: Field identifier attached to the raised error.
        """
        if not self.is_valid:
            raise FieldValidationError(self.message or "", field_id=field_id)


@dataclass(frozen=True)
class Valid(ValidationOutcome):
    """The value satisfies its rule."""

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid(ValidationOutcome):
    """The value violates its rule; ``reason`` is the message to display."""

    reason: str

    @property
    def is_valid(self) -> bool:
        return False

    @property
    def message(self) -> Optional[str]:
        return self.reason


VALID = Valid()
