# tests/unit/test_loader.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from formstate.core.config import FormConfig
from formstate.core.errors import ResourceLoadError
from formstate.runtime.loader import (
    FALLBACK_PLACEHOLDER,
    LOADING_PLACEHOLDER,
    REMOTE_PLACEHOLDER,
    LoaderStatus,
    OptionLoader,
    OptionSource,
    collate,
    parse_country_names,
)
from formstate.runtime.presentation import MemoryPresentation

EXPECTED_FALLBACK = [
    "Argentina",
    "Bolivia",
    "Chile",
    "Colombia",
    "Ecuador",
    "España",
    "México",
    "Perú",
    "Venezuela",
]


@pytest.fixture
def loader_adapter():
    return MemoryPresentation(["country"])


def test_collate_ignores_case_and_accents():
    assert collate(["perú", "Paraguay", "Panamá", "Austria", "Åland"]) == [
        "Åland",
        "Austria",
        "Panamá",
        "Paraguay",
        "perú",
    ]


def test_collate_spanish_enye_after_n():
    assert collate(["Ñuñoa", "Nuevo León", "Oaxaca", "Nicaragua"]) == [
        "Nicaragua",
        "Nuevo León",
        "Ñuñoa",
        "Oaxaca",
    ]


def test_collate_compares_spaces_and_punctuation_as_characters():
    assert collate(["Guinea-Bissau", "Guinea Ecuatorial", "Guinea"]) == [
        "Guinea",
        "Guinea Ecuatorial",
        "Guinea-Bissau",
    ]


def test_parse_country_names_drops_unnamed_records():
    payload = [{"name": {"common": "Chile"}}, {"name": {"common": ""}}, {"name": {"official": "X"}}]
    assert parse_country_names(payload) == ["Chile"]


@pytest.mark.parametrize("payload", [[], [{"name": {"common": None}}, {"name": {}}]])
def test_parse_country_names_accepts_empty_listing(payload):
    assert parse_country_names(payload) == []


@pytest.mark.parametrize(
    "payload",
    [
        {"name": {"common": "Chile"}},
        [{"name": {"common": "Chile"}}, {"cca2": "CL"}],
        ["Chile"],
    ],
)
def test_parse_country_names_rejects_other_shapes(payload):
    with pytest.raises(ResourceLoadError):
        parse_country_names(payload)


@pytest.mark.asyncio
async def test_successful_load_populates_collated_names(loader_adapter, countries_payload, mock_client_factory):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["disabled"] = "country" in loader_adapter.disabled_controls
        seen["options"] = list(loader_adapter.options["country"])
        return httpx.Response(200, json=countries_payload)

    on_complete = MagicMock()
    client = mock_client_factory(handler)
    loader = OptionLoader(loader_adapter, FormConfig(), client=client, on_complete=on_complete)

    result = await loader.load_options()
    await client.aclose()

    assert seen["url"] == FormConfig().countries_url
    assert seen["disabled"] is True
    assert seen["options"] == [LOADING_PLACEHOLDER]
    assert result.source is OptionSource.REMOTE
    assert list(result) == ["Åland Islands", "Argentina", "Chile", "Perú", "Uruguay"]
    assert loader_adapter.options["country"] == [REMOTE_PLACEHOLDER, *result.options]
    assert loader.status is LoaderStatus.POPULATED
    assert loader.options is result
    assert "country" not in loader_adapter.disabled_controls
    on_complete.assert_called_once_with()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json=[{"name": {"common": "Chile"}}]),
        httpx.Response(404),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"message": "unexpected"}),
    ],
)
async def test_failed_response_uses_fallback(loader_adapter, mock_client_factory, response):
    client = mock_client_factory(lambda request: response)
    loader = OptionLoader(loader_adapter, FormConfig(), client=client)

    result = await loader.load_options()
    await client.aclose()

    assert result.source is OptionSource.FALLBACK
    assert list(result) == EXPECTED_FALLBACK
    assert loader_adapter.options["country"] == [FALLBACK_PLACEHOLDER, *EXPECTED_FALLBACK]
    assert loader.status is LoaderStatus.FALLBACK_POPULATED
    assert "country" not in loader_adapter.disabled_controls


@pytest.mark.asyncio
async def test_network_error_uses_fallback(loader_adapter, mock_client_factory):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = mock_client_factory(handler)
    loader = OptionLoader(loader_adapter, FormConfig(), client=client)
    result = await loader.load_options()
    await client.aclose()

    assert result.source is OptionSource.FALLBACK
    assert loader.status is LoaderStatus.FALLBACK_POPULATED


@pytest.mark.asyncio
async def test_timeout_uses_fallback_without_raising(loader_adapter, countries_payload, mock_client_factory):
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json=countries_payload)

    on_complete = MagicMock()
    client = mock_client_factory(handler)
    loader = OptionLoader(loader_adapter, FormConfig(timeout_ms=50), client=client, on_complete=on_complete)

    loop = asyncio.get_running_loop()
    started = loop.time()
    result = await loader.load_options()
    elapsed = loop.time() - started
    await client.aclose()

    assert elapsed < 0.5
    assert result.source is OptionSource.FALLBACK
    assert loader_adapter.options["country"][0] == FALLBACK_PLACEHOLDER
    assert "country" not in loader_adapter.disabled_controls
    on_complete.assert_called_once_with()


@pytest.mark.asyncio
async def test_load_is_skipped_when_options_present(loader_adapter, countries_payload, mock_client_factory):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=countries_payload)

    client = mock_client_factory(handler)
    loader = OptionLoader(loader_adapter, FormConfig(), client=client)
    assert await loader.load_options() is not None
    assert await loader.load_options() is None
    await client.aclose()

    assert len(requests) == 1


@pytest.mark.asyncio
async def test_concurrent_load_is_skipped(loader_adapter, countries_payload, mock_client_factory):
    async def handler(request):
        await asyncio.sleep(0.02)
        return httpx.Response(200, json=countries_payload)

    client = mock_client_factory(handler)
    loader = OptionLoader(loader_adapter, FormConfig(), client=client)
    first, second = await asyncio.gather(loader.load_options(), loader.load_options())
    await client.aclose()

    assert first is not None
    assert second is None


@pytest.mark.asyncio
async def test_async_completion_callback_is_awaited(loader_adapter, mock_client_factory):
    completed = []

    async def on_complete():
        completed.append(True)

    client = mock_client_factory(lambda request: httpx.Response(503))
    loader = OptionLoader(loader_adapter, FormConfig(), client=client, on_complete=on_complete)
    await loader.load_options()
    await client.aclose()

    assert completed == [True]


@pytest.mark.asyncio
async def test_empty_listing_populates_remote_placeholder(loader_adapter, mock_client_factory):
    on_complete = MagicMock()
    client = mock_client_factory(lambda request: httpx.Response(200, json=[]))
    loader = OptionLoader(loader_adapter, FormConfig(), client=client, on_complete=on_complete)

    result = await loader.load_options()
    await client.aclose()

    assert loader.status is LoaderStatus.POPULATED
    assert result.source is OptionSource.REMOTE
    assert len(result) == 0
    assert loader_adapter.options["country"] == [REMOTE_PLACEHOLDER]
    assert "country" not in loader_adapter.disabled_controls
    on_complete.assert_called_once_with()
