# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from datetime import date

import httpx
import pytest

from formstate.core.config import FormConfig
from formstate.core.engine import ValidationEngine
from formstate.core.registry import default_registry
from formstate.runtime.presentation import MemoryPresentation

TODAY = date(2024, 6, 15)

VALID_VALUES = {
    "name": "Ana",
    "surname": "Pérez Loor",
    "national_id": "099123456-7",
    "birth_date": "1990-05-20",
    "country": "Ecuador",
    "gender": "female",
    "phone": "0991234567",
    "email": "ana.perez@example.com",
}


@pytest.fixture
def today():
    """Fixed reference date for date rules."""
    return TODAY


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def engine(registry, clock):
    return ValidationEngine(registry, clock=clock)


@pytest.fixture
def valid_values():
    return dict(VALID_VALUES)


@pytest.fixture
def adapter(registry):
    """An in-memory form holding every registered field, all empty."""
    return MemoryPresentation(registry.field_ids())


@pytest.fixture
def filled_adapter(registry, valid_values):
    """An in-memory form with every registered field holding a valid value."""
    return MemoryPresentation(registry.field_ids(), values=valid_values)


@pytest.fixture
def fast_config():
    """Short delays so timing-dependent tests stay quick."""
    return FormConfig(timeout_ms=200, debounce_ms=20, submit_delay_ms=10)


@pytest.fixture
def countries_payload():
    return [
        {"name": {"common": "Uruguay"}},
        {"name": {"common": "Perú"}},
        {"name": {"common": "Argentina"}},
        {"name": {"common": "Åland Islands"}},
        {"name": {"common": "Chile"}},
    ]


@pytest.fixture
def mock_client_factory():
    """Build an httpx.AsyncClient whose requests are answered by ``handler``."""

    def create(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return create
