# formstate/core/config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

from formstate.core.errors import ConfigurationError

DEFAULT_COUNTRIES_URL = "https://restcountries.com/v3.1/all?fields=name"


@dataclass(frozen=True)
class FormConfig:
    """
    Recognized engine options. All durations are milliseconds.

    Attributes:
        timeout_ms: Deadline for the remote option request.
        debounce_ms: Delay used to coalesce input events.
        submit_delay_ms: Duration of the simulated submission work.
        countries_url: Remote country listing endpoint.
        collation_locale: Locale used to order option lists.
        options_field: Field whose options are loaded remotely.
    """

    timeout_ms: int = 4500
    debounce_ms: int = 250
    submit_delay_ms: int = 1000
    countries_url: str = DEFAULT_COUNTRIES_URL
    collation_locale: str = "es"
    options_field: str = "country"

    def __post_init__(self) -> None:
        for name in ("timeout_ms", "debounce_ms", "submit_delay_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative number, got {value!r}")
        if not self.countries_url:
            raise ConfigurationError("countries_url must not be empty")
        if not self.options_field:
            raise ConfigurationError("options_field must not be empty")

    @property
    def timeout(self) -> float:
        """Request deadline in seconds."""
        return self.timeout_ms / 1000

    @property
    def debounce_delay(self) -> float:
        return self.debounce_ms / 1000

    @property
    def submit_delay(self) -> float:
        return self.submit_delay_ms / 1000

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "FormConfig":
        """
        Build a config from a mapping using either attribute names or the
        camelCase option names (``timeoutMs``, ``debounceMs``, ...).

        :raises ConfigurationError: On unrecognized option names.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in options.items():
            name = _snake_case(key)
            if name not in known:
                raise ConfigurationError(f"Unrecognized option: {key}")
            kwargs[name] = value
        return cls(**kwargs)


def _snake_case(key: str) -> str:
    return "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in key)
