# formstate/core/engine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Mapping, Optional, Union

from formstate.core import rules
from formstate.core.outcomes import VALID, Invalid, ValidationOutcome
from formstate.core.registry import RuleRegistry

logger = logging.getLogger(__name__)

ValueSource = Union[Mapping[str, Optional[str]], Callable[[str], Optional[str]]]


@dataclass(frozen=True)
class CacheEntry:
    """
    Memoized verdict for one field. The entry only holds while the field's
    current normalized value equals ``last_normalized_value``.
    """

    last_normalized_value: str
    verdict: ValidationOutcome


class ValidationEngine:
    """
    Evaluates field values against their registered rules and memoizes the
    verdict per field, so a value that has not changed since the last check is
    never re-evaluated.

    Runtime Invariants:
    - The cache holds at most one entry per field identifier.
    - A cached verdict is returned only for an identical normalized value.
    - Fields without a rule are always valid and never cached.
    """

    def __init__(self, registry: RuleRegistry, clock: Optional[Callable[[], date]] = None) -> None:
        """
        :param registry: Rules governing the form's fields.
        :param clock: Source of the reference date for date rules. Defaults to
                      ``date.today``.
        """
        self._registry = registry
        self._clock = clock or date.today
        self._cache: Dict[str, CacheEntry] = {}

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    def normalize(self, field_id: str, raw_value: Optional[str]) -> str:
        """Normalize a raw value with the field's rule; unknown fields are returned as-is."""
        rule = self._registry.get_rule(field_id)
        if rule is None:
            return raw_value or ""
        return rules.normalize(rule, raw_value)

    def validate_field(self, field_id: str, raw_value: Optional[str], force: bool = False) -> ValidationOutcome:
        """
        Validate the current raw value of a field.

        :param field_id: Identifier of the field.
        :param raw_value: Value as currently displayed by the field.
        :param force: Skip the cache lookup and re-run the rule. The fresh
                      verdict is still stored.
        :return: Valid, or Invalid carrying the message to display.
        """
        rule = self._registry.get_rule(field_id)
        if rule is None:
            logger.debug("No rule registered for field %r; treating as valid", field_id)
            return VALID

        normalized = rules.normalize(rule, raw_value)

        entry = self._cache.get(field_id)
        if not force and entry is not None and entry.last_normalized_value == normalized:
            logger.debug("Cache hit for field %r", field_id)
            return entry.verdict

        verdict = rules.evaluate(rule, normalized, self._clock())
        if verdict.is_valid and rule.required and normalized == "":
            verdict = Invalid(rule.message)

        self._cache[field_id] = CacheEntry(last_normalized_value=normalized, verdict=verdict)
        return verdict

    def overall_valid(self, values: ValueSource) -> bool:
        """
        Validate every registered field's currently observed value and AND the
        verdicts. Every field is visited, so the cache is refreshed for all of
        them as a side effect.

        :param values: Mapping or callable giving a field's raw value. A value
                       of None means the field is not present on the form and
                       does not participate.
        """
        read = values.get if isinstance(values, Mapping) else values
        verdicts = []
        for field_id in self._registry.field_ids():
            raw_value = read(field_id)
            if raw_value is None:
                continue
            verdicts.append(self.validate_field(field_id, raw_value).is_valid)
        return all(verdicts)

    def cached(self, field_id: str) -> Optional[CacheEntry]:
        return self._cache.get(field_id)

    def invalidate(self, field_id: str) -> None:
        """Drop the cached verdict of one field."""
        self._cache.pop(field_id, None)

    def reset(self) -> None:
        """Drop every cached verdict."""
        self._cache.clear()
