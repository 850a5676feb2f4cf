from collections.abc import Iterable
from enum import Enum
from http import HTTPStatus
from typing import Any

import httpx
from pydantic import ValidationError

from geolocator.address_set import AddressSet
from geolocator.errors import InvalidConfigurationError, LookupFailureError
from geolocator.logger import logger
from geolocator.models.common import Location, Precision, TimeoutKind
from geolocator.models.config import LocatorConfig
from geolocator.models.fetch import FetchFailure, FetchResult, FetchSuccess
from geolocator.parsing import entry_is_ok, entry_status, parse_location

PRIMARY_HOST = "http://ipinfodb.com/"
BACKUP_HOST = "http://backup.ipinfodb.com/"

# Batch-capable resources; used even for a single address so every request has the same shape.
BATCH_PATHS: dict[Precision, str] = {
    Precision.CITY: "ip_query2.php",
    Precision.COUNTRY: "ip_query2_country.php",
}


class LookupState(str, Enum):
    """Whether the stored results reflect the current addresses and config."""

    DIRTY = "dirty"
    LOOKED_UP = "looked_up"


class LocatorClient:
    """Client for the IPInfoDB batch location API.

    Addresses are collected in an AddressSet and resolved with a single GET
    against the primary host. If that request fails for any reason it is
    repeated once, unchanged, against the backup host.

    Reads are lazy: `get_location` and `get_all_locations` run `lookup()` first
    whenever the client is DIRTY, i.e. after construction, after an address was
    added, or after precision or a timeout changed.
    """

    def __init__(
        self,
        addresses: str | Iterable[str] | None = None,
        config: LocatorConfig | None = None,
        primary_host: str = PRIMARY_HOST,
        backup_host: str = BACKUP_HOST,
    ) -> None:
        self._config = config or LocatorConfig()
        self._primary_host = primary_host.rstrip("/") + "/"
        self._backup_host = backup_host.rstrip("/") + "/"
        self._state = LookupState.DIRTY
        self._addresses = AddressSet(on_change=self._mark_dirty)

        if isinstance(addresses, str):
            self._addresses.add(addresses)
        elif addresses is not None:
            self._addresses.add_many(addresses)

    @property
    def addresses(self) -> AddressSet:
        return self._addresses

    @property
    def config(self) -> LocatorConfig:
        return self._config

    @property
    def state(self) -> LookupState:
        return self._state

    @property
    def has_data(self) -> bool:
        return self._state == LookupState.LOOKED_UP

    def _mark_dirty(self) -> None:
        self._state = LookupState.DIRTY

    # Address collection

    def add_address(self, address: str) -> bool:
        """Add an address; False means the 25-address limit was already reached."""
        return self._addresses.add(address)

    def address_count(self) -> int:
        return self._addresses.count()

    def get_addresses(self) -> list[str]:
        return self._addresses.keys()

    # Results

    def get_all_locations(self) -> dict[str, Location | None]:
        self._ensure_looked_up()
        return self._addresses.all()

    def get_location(self, address: str) -> Location | None:
        self._ensure_looked_up()
        return self._addresses.get(address)

    def _ensure_looked_up(self) -> None:
        if self._state != LookupState.LOOKED_UP:
            self.lookup()

    # Configuration

    def set_use_backup_first(self, use_backup_first: bool) -> None:
        """Try the backup host before the primary one.

        The backup server sits in Europe, so European deployments may see
        lower latency with it first. Does not invalidate stored results.
        """
        self._config = self._replace_config(use_backup_first=use_backup_first)

    def set_timeout(self, kind: TimeoutKind | str, seconds: float) -> None:
        """Set the connect or transfer timeout (defaults: 2s connect, 3s transfer)."""
        try:
            timeout_kind = TimeoutKind(kind)
        except ValueError as exc:
            raise InvalidConfigurationError(f"Invalid timeout type specified: {kind!r}") from exc

        if isinstance(seconds, bool):
            raise InvalidConfigurationError(f"Invalid time specified: {seconds!r}")

        if timeout_kind == TimeoutKind.CONNECT:
            self._config = self._replace_config(connect_timeout_seconds=seconds)
        else:
            self._config = self._replace_config(transfer_timeout_seconds=seconds)
        self._mark_dirty()

    def set_precision(self, precision: Precision | str) -> None:
        try:
            level = Precision(precision)
        except ValueError as exc:
            raise InvalidConfigurationError(f"Invalid precision specified: {precision!r}") from exc

        self._config = self._replace_config(precision=level)
        self._mark_dirty()

    def _replace_config(self, **changes: Any) -> LocatorConfig:
        try:
            return self._config.replace(**changes)
        except ValidationError as exc:
            raise InvalidConfigurationError(f"Invalid configuration {changes!r}: {exc}") from exc

    # Lookup

    def endpoints(self) -> tuple[str, str]:
        """Return (endpoint, backup_endpoint) for the current precision and host order."""
        path = BATCH_PATHS[self._config.precision]
        endpoint = self._primary_host + path
        backup_endpoint = self._backup_host + path
        if self._config.use_backup_first:
            return backup_endpoint, endpoint
        return endpoint, backup_endpoint

    def build_query(self) -> str:
        if self._addresses.count() == 1:
            return self._addresses.single_key()
        return ",".join(self._addresses.keys())

    def lookup(self) -> bool:
        """Resolve every address with one batch request, failing over to the backup host once.

        Raises LookupFailureError when both hosts fail; stored results are then
        left exactly as they were. Individual addresses the service could not
        resolve end up with a None result and a warning in the log.
        """
        precision = self._config.precision
        expected = self._addresses.count()

        if expected == 0:
            self._state = LookupState.LOOKED_UP
            return True

        endpoint, backup_endpoint = self.endpoints()
        query = self.build_query()

        outcome = self._attempt(endpoint, query, expected)
        if isinstance(outcome, FetchFailure):
            logger.warning(f"Primary lookup failed, trying backup endpoint={outcome.endpoint} reason={outcome.reason}")
            outcome = self._attempt(backup_endpoint, query, expected)

        if isinstance(outcome, FetchFailure):
            logger.error(f"Backup lookup failed endpoint={outcome.endpoint} reason={outcome.reason}")
            raise LookupFailureError(f"Both endpoints failed; last error from {outcome.endpoint}: {outcome.reason}")

        entries = outcome.document["Locations"]
        results: list[Location | None] = []
        for entry in entries:
            if entry_is_ok(entry):
                results.append(parse_location(entry, precision))
            else:
                logger.warning(
                    f"API returned error for {entry.get('Ip')} : {entry_status(entry)} . Precision: {precision.value}"
                )
                results.append(None)

        self._addresses.store_results(results)
        self._state = LookupState.LOOKED_UP
        return True

    def _attempt(self, endpoint: str, query: str, expected: int) -> FetchResult:
        """Run one request and fold every failure mode into a FetchFailure value."""
        try:
            document = self._request(f"{endpoint}?ip={query}&output=json")
            self._check_document(document, expected)
        except LookupFailureError as exc:
            return FetchFailure(endpoint=endpoint, reason=str(exc))
        return FetchSuccess(endpoint=endpoint, document=document)

    def _request(self, url: str) -> dict[str, Any]:
        timeout = self._transport_timeout()
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            raise LookupFailureError(f"Request to location service failed: {repr(exc)}") from exc

        self._handle_http_errors(response)
        return self._parse_json(response)

    def _transport_timeout(self) -> httpx.Timeout:
        """Build the httpx timeout; a configured 0 means no limit, as with curl."""
        transfer = self._config.transfer_timeout_seconds or None
        connect = self._config.connect_timeout_seconds or None
        return httpx.Timeout(transfer, connect=connect)

    @staticmethod
    def _handle_http_errors(response: httpx.Response) -> None:
        status_code = response.status_code
        if not HTTPStatus.OK <= status_code < HTTPStatus.MULTIPLE_CHOICES:
            raise LookupFailureError(f"Location service returned HTTP {status_code}: {response.text}")

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        if not response.text.strip():
            raise LookupFailureError("Location service returned an empty body")
        try:
            data = response.json()
        except ValueError as exc:
            raise LookupFailureError(f"Failed to decode location service response as JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise LookupFailureError(f"Unexpected JSON document type: {type(data).__name__}")
        return data

    @staticmethod
    def _check_document(document: dict[str, Any], expected: int) -> None:
        """The service answers with one entry per requested address, in request order."""
        entries = document.get("Locations")
        if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
            raise LookupFailureError("Response document has no usable 'Locations' list")
        if len(entries) != expected:
            raise LookupFailureError(f"Expected {expected} locations in response, got {len(entries)}")
