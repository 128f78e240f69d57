# formstate/core/rules.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum, auto
from typing import Callable, ClassVar, Dict, Optional, Union

from formstate.core.errors import ConfigurationError
from formstate.core.outcomes import VALID, Invalid, ValidationOutcome

_NON_DIGITS = re.compile(r"\D")
_SEPARATOR = "-"
DIGIT_LIMIT = 10


class RuleKind(Enum):
    """The finite set of rule families a field can carry."""

    LENGTH = auto()
    PATTERN = auto()
    BIRTH_DATE = auto()
    SELECTION = auto()


class Normalization(Enum):
    """Cleanup applied to a raw value before the rule sees it."""

    NONE = auto()  # date and select controls
    TRIM = auto()  # free text
    DIGITS = auto()  # formatted numeric input: digits only, truncated


class InputFormat(Enum):
    """Rewriting applied to the displayed value on every input event."""

    NONE = auto()
    DIGITS = auto()  # strip non-digits, truncate
    DIGITS_CHECK_SEPARATOR = auto()  # as DIGITS, separator before the check digit


@dataclass(frozen=True)
class LengthParams:
    min_length: int

    kind: ClassVar[RuleKind] = RuleKind.LENGTH


@dataclass(frozen=True)
class PatternParams:
    pattern: str

    kind: ClassVar[RuleKind] = RuleKind.PATTERN


@dataclass(frozen=True)
class BirthDateParams:
    min_age: int
    future_message: str = "Birth date cannot be in the future."
    age_message: str = "Calculated age: {age} years. You must be at least {min_age}."

    kind: ClassVar[RuleKind] = RuleKind.BIRTH_DATE


@dataclass(frozen=True)
class SelectionParams:
    kind: ClassVar[RuleKind] = RuleKind.SELECTION


RuleParams = Union[LengthParams, PatternParams, BirthDateParams, SelectionParams]


@dataclass(frozen=True)
class RuleDescriptor:
    """
    Validation contract attached to one field identifier. Descriptors are
    immutable and defined once, when the registry is built.

    :param field_id: Identifier of the field the rule governs.
    :param label: Human readable label used in submission summaries.
    :param params: Typed parameters of the rule family.
    :param message: Default message reported when the rule rejects a value.
    :param required: Whether an empty normalized value is always invalid.
    :param normalization: Cleanup applied before evaluation.
    :param input_format: Display rewriting applied on input events.
    """

    field_id: str
    label: str
    params: RuleParams
    message: str
    required: bool = True
    normalization: Normalization = Normalization.TRIM
    input_format: InputFormat = InputFormat.NONE

    def __post_init__(self) -> None:
        if not self.field_id or not self.field_id.strip():
            raise ConfigurationError("Rule field_id must be a non-empty string.")
        if not isinstance(self.params, (LengthParams, PatternParams, BirthDateParams, SelectionParams)):
            raise ConfigurationError(f"Unsupported rule parameters for '{self.field_id}': {self.params!r}")
        if isinstance(self.params, PatternParams):
            try:
                re.compile(self.params.pattern)
            except re.error as exc:
                raise ConfigurationError(f"Invalid pattern for '{self.field_id}': {exc}") from exc

    @property
    def kind(self) -> RuleKind:
        return self.params.kind

    @property
    def format_on_input(self) -> bool:
        return self.input_format is not InputFormat.NONE


def normalize(rule: RuleDescriptor, raw_value: Optional[str]) -> str:
    """
    Apply the rule's normalization to a raw field value.

    ``None`` is treated as an empty value.
    """
    value = raw_value or ""
    if rule.normalization is Normalization.TRIM:
        return value.strip()
    if rule.normalization is Normalization.DIGITS:
        return _NON_DIGITS.sub("", value)[:DIGIT_LIMIT]
    return value


def format_for_display(rule: RuleDescriptor, raw_value: Optional[str]) -> str:
    """
    Rewrite a raw value the way the field displays it while the user types.

    Digits are kept and truncated to ten; the check-separator format then
    inserts a separator before the final digit once all ten are present.
    Rules without an input format return the value unchanged.
    """
    value = raw_value or ""
    if rule.input_format is InputFormat.NONE:
        return value
    digits = _NON_DIGITS.sub("", value)[:DIGIT_LIMIT]
    if rule.input_format is InputFormat.DIGITS_CHECK_SEPARATOR and len(digits) == DIGIT_LIMIT:
        return f"{digits[:-1]}{_SEPARATOR}{digits[-1]}"
    return digits


def whole_years_between(born: date, today: date) -> int:
    """Whole years elapsed from ``born`` to ``today``, counted by anniversaries."""
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years


def _evaluate_length(rule: RuleDescriptor, value: str, today: date) -> ValidationOutcome:
    if len(value) >= rule.params.min_length:
        return VALID
    return Invalid(rule.message)


def _evaluate_pattern(rule: RuleDescriptor, value: str, today: date) -> ValidationOutcome:
    if re.fullmatch(rule.params.pattern, value):
        return VALID
    return Invalid(rule.message)


def _evaluate_birth_date(rule: RuleDescriptor, value: str, today: date) -> ValidationOutcome:
    params: BirthDateParams = rule.params
    if not value:
        return Invalid(rule.message)
    try:
        born = date.fromisoformat(value)
    except ValueError:
        return Invalid(rule.message)
    if born > today:
        return Invalid(params.future_message)
    age = whole_years_between(born, today)
    if age < params.min_age:
        return Invalid(params.age_message.format(age=age, min_age=params.min_age))
    return VALID


def _evaluate_selection(rule: RuleDescriptor, value: str, today: date) -> ValidationOutcome:
    if value != "":
        return VALID
    return Invalid(rule.message)


_EVALUATORS: Dict[RuleKind, Callable[[RuleDescriptor, str, date], ValidationOutcome]] = {
    RuleKind.LENGTH: _evaluate_length,
    RuleKind.PATTERN: _evaluate_pattern,
    RuleKind.BIRTH_DATE: _evaluate_birth_date,
    RuleKind.SELECTION: _evaluate_selection,
}


def evaluate(rule: RuleDescriptor, normalized_value: str, today: date) -> ValidationOutcome:
    """
    Evaluate a rule's predicate against an already normalized value.

    The predicate is pure: the reference date is passed in rather than read
    from the wall clock. Required-ness is not applied here.

    :param rule: Rule to evaluate.
    :param normalized_value: Value after ``normalize``.
    :param today: Reference date for date-dependent rules.
    :return: The predicate's outcome.
    """
    return _EVALUATORS[rule.kind](rule, normalized_value, today)
