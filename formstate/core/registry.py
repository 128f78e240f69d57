# formstate/core/registry.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from formstate.core.errors import ConfigurationError
from formstate.core.rules import (
    BirthDateParams,
    InputFormat,
    LengthParams,
    Normalization,
    PatternParams,
    RuleDescriptor,
    SelectionParams,
)

TEN_DIGITS = r"[0-9]{10}"
EMAIL_PATTERN = r"[^\s@]+@[^\s@]+\.[^\s@]+"


class RuleRegistry:
    """
    Static mapping of field identifier to its rule descriptor. Registration
    order is preserved and is the order used for aggregate validation and for
    submission summaries.

    Runtime Invariants:
    - At most one descriptor per field identifier.
    - Descriptors are never replaced once registered.
    """

    def __init__(self, rules: Optional[Iterable[RuleDescriptor]] = None) -> None:
        self._rules: Dict[str, RuleDescriptor] = {}
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: RuleDescriptor) -> None:
        """
        Add a descriptor to the registry.

        :param rule: The descriptor to add.
        :raises ConfigurationError: If the field already has a rule.
        """
        if rule.field_id in self._rules:
            raise ConfigurationError(f"Field '{rule.field_id}' already has a registered rule.")
        self._rules[rule.field_id] = rule

    def get_rule(self, field_id: str) -> Optional[RuleDescriptor]:
        """Return the descriptor for ``field_id``, or None when the field has no rule."""
        return self._rules.get(field_id)

    def field_ids(self) -> List[str]:
        return list(self._rules)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._rules

    def __iter__(self) -> Iterator[RuleDescriptor]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


def default_registry() -> RuleRegistry:
    """
    Build the registration form's rule set: personal names, national ID, birth
    date, country and gender selections, phone and email.
    """
    return RuleRegistry(
        [
            RuleDescriptor(
                field_id="name",
                label="Name",
                params=LengthParams(min_length=2),
                message="Name must be at least 2 characters long.",
            ),
            RuleDescriptor(
                field_id="surname",
                label="Surname",
                params=LengthParams(min_length=2),
                message="Surname must be at least 2 characters long.",
            ),
            RuleDescriptor(
                field_id="national_id",
                label="National ID",
                params=PatternParams(pattern=TEN_DIGITS),
                message="National ID must have exactly 10 digits.",
                normalization=Normalization.DIGITS,
                input_format=InputFormat.DIGITS_CHECK_SEPARATOR,
            ),
            RuleDescriptor(
                field_id="birth_date",
                label="Birth date",
                params=BirthDateParams(min_age=18),
                message="Invalid birth date (you must be at least 18 years old).",
                normalization=Normalization.NONE,
            ),
            RuleDescriptor(
                field_id="country",
                label="Country",
                params=SelectionParams(),
                message="Select a valid country.",
                normalization=Normalization.NONE,
            ),
            RuleDescriptor(
                field_id="gender",
                label="Gender",
                params=SelectionParams(),
                message="Select a gender.",
                normalization=Normalization.NONE,
            ),
            RuleDescriptor(
                field_id="phone",
                label="Phone",
                params=PatternParams(pattern=TEN_DIGITS),
                message="Phone number must have 10 digits.",
                normalization=Normalization.DIGITS,
                input_format=InputFormat.DIGITS,
            ),
            RuleDescriptor(
                field_id="email",
                label="Email",
                params=PatternParams(pattern=EMAIL_PATTERN),
                message="Enter a valid email address.",
            ),
        ]
    )
