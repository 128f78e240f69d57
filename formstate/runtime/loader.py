# formstate/runtime/loader.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import inspect
import logging
import unicodedata
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterable, List, Optional, Tuple

import httpx

from formstate.core.config import FormConfig
from formstate.core.errors import ResourceLoadError
from formstate.interfaces.protocols import PresentationAdapter
from formstate.interfaces.types import ReadinessCallback

logger = logging.getLogger(__name__)

FALLBACK_COUNTRIES: Tuple[str, ...] = (
    "Ecuador",
    "Colombia",
    "Perú",
    "Chile",
    "Argentina",
    "México",
    "España",
    "Venezuela",
    "Bolivia",
)

LOADING_PLACEHOLDER = "Fetching countries..."
REMOTE_PLACEHOLDER = "Choose your country"
FALLBACK_PLACEHOLDER = "Countries (offline mode)"


class LoaderStatus(Enum):
    """Lifecycle of a remote option load."""

    IDLE = auto()  # Nothing requested yet
    LOADING = auto()  # Request in flight, control disabled
    POPULATED = auto()  # Control holds the fetched options
    FALLBACK_POPULATED = auto()  # Control holds the embedded fallback


class OptionSource(Enum):
    REMOTE = "remote"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class OptionList:
    """
    Collated option names for the remotely loaded field, either all fetched or
    all fallback, never a mix.
    """

    options: Tuple[str, ...]
    placeholder: str
    source: OptionSource

    def __len__(self) -> int:
        return len(self.options)

    def __iter__(self):
        return iter(self.options)


def collation_key(name: str, locale: str = "es") -> Tuple[str, str]:
    """
    Sort key comparing names at base strength: case and accents are ignored,
    original text breaks ties. In Spanish ``ñ`` is its own letter after ``n``.

    This approximates ICU collation for the Spanish locale. Spaces and
    punctuation are compared as ordinary code points rather than being
    ignored or weighted the way ICU does, and only the ``ñ`` tailoring is
    applied.
    """
    folded = unicodedata.normalize("NFC", name).casefold()
    if locale.split("-")[0].split("_")[0] == "es":
        folded = folded.replace("ñ", "n\U0010ffff")
    decomposed = unicodedata.normalize("NFD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, name


def collate(names: Iterable[str], locale: str = "es") -> List[str]:
    """Order names ascending by ``collation_key``."""
    return sorted(names, key=lambda name: collation_key(name, locale))


def parse_country_names(payload: Any) -> List[str]:
    """
    Extract the ``name.common`` string from every record of a country listing.
    Records whose common name is missing or empty are dropped; a listing left
    with no names is returned empty.

    :raises ResourceLoadError: If the payload is not a sequence of records each
                               carrying a ``name`` object.
    """
    if not isinstance(payload, list):
        raise ResourceLoadError(f"Expected a list of records, got {type(payload).__name__}")
    names: List[str] = []
    for record in payload:
        if not isinstance(record, dict) or not isinstance(record.get("name"), dict):
            raise ResourceLoadError(f"Malformed country record: {record!r}")
        common = record["name"].get("common")
        if isinstance(common, str) and common:
            names.append(common)
    return names


class OptionLoader:
    """
    Populates one select control from a remote country listing.

    The request is bounded by ``FormConfig.timeout_ms``; on any failure the
    control receives the embedded fallback list instead, and nothing is
    raised. Whatever the outcome, the control is re-enabled and the readiness
    callback runs afterwards.
    """

    def __init__(
        self,
        adapter: PresentationAdapter,
        config: Optional[FormConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        on_complete: Optional[ReadinessCallback] = None,
    ) -> None:
        """
        :param adapter: Presentation collaborator owning the select control.
        :param config: Engine configuration; defaults apply when omitted.
        :param client: HTTP client to use. A short-lived client is created per
                       load when omitted.
        :param on_complete: Called after every load, successful or not.
        """
        self._adapter = adapter
        self._config = config or FormConfig()
        self._client = client
        self._on_complete = on_complete
        self._status = LoaderStatus.IDLE
        self._options: Optional[OptionList] = None

    @property
    def status(self) -> LoaderStatus:
        return self._status

    @property
    def options(self) -> Optional[OptionList]:
        """The option list most recently populated, if any."""
        return self._options

    async def load_options(self) -> Optional[OptionList]:
        """
        Fetch, collate and populate the options.

        :return: The populated list, or None when the control already held
                 options or a load was already in flight.
        """
        field_id = self._config.options_field
        if self._status is LoaderStatus.LOADING or self._adapter.option_count(field_id) > 1:
            logger.debug("Options for %r already present; skipping load", field_id)
            return None

        self._status = LoaderStatus.LOADING
        self._adapter.set_control_enabled(field_id, False)
        self._adapter.set_options(field_id, LOADING_PLACEHOLDER, [])

        try:
            try:
                names = await asyncio.wait_for(self._fetch_names(), timeout=self._config.timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Country request exceeded %sms; using fallback list", self._config.timeout_ms
                )
                option_list = self._fallback()
            except ResourceLoadError as exc:
                logger.warning("Country request failed (%s); using fallback list", exc)
                option_list = self._fallback()
            else:
                option_list = OptionList(
                    options=tuple(collate(names, self._config.collation_locale)),
                    placeholder=REMOTE_PLACEHOLDER,
                    source=OptionSource.REMOTE,
                )
                self._status = LoaderStatus.POPULATED
                logger.info("Loaded %d countries", len(option_list))

            self._adapter.set_options(field_id, option_list.placeholder, option_list.options)
            self._options = option_list
            return option_list
        finally:
            if self._status is LoaderStatus.LOADING:
                # Cancelled before an outcome was reached.
                self._status = LoaderStatus.IDLE
            self._adapter.set_control_enabled(field_id, True)
            await self._notify_complete()

    def _fallback(self) -> OptionList:
        self._status = LoaderStatus.FALLBACK_POPULATED
        return OptionList(
            options=tuple(collate(FALLBACK_COUNTRIES, self._config.collation_locale)),
            placeholder=FALLBACK_PLACEHOLDER,
            source=OptionSource.FALLBACK,
        )

    async def _fetch_names(self) -> List[str]:
        if self._client is not None:
            return await self._request(self._client)
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            return await self._request(client)

    async def _request(self, client: httpx.AsyncClient) -> List[str]:
        try:
            response = await client.get(self._config.countries_url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ResourceLoadError(f"Request error: {exc}") from exc
        if not response.is_success:
            raise ResourceLoadError(f"Unexpected status: {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise ResourceLoadError(f"Invalid JSON body: {exc}") from exc
        return parse_country_names(payload)

    async def _notify_complete(self) -> None:
        if self._on_complete is None:
            return
        result = self._on_complete()
        if inspect.isawaitable(result):
            await result
