import json
from http import HTTPStatus
from typing import Any

import httpx

PRIMARY = "http://primary.test/"
BACKUP = "http://backup.test/"


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class MockClient:
    """Minimal context-manager mock for httpx.Client, answering through its transport."""

    def __init__(self, transport: "FakeTransport") -> None:
        self._transport = transport

    def __enter__(self) -> "MockClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def get(self, url: str) -> MockResponse:
        return self._transport.answer(url)


class FakeTransport:
    """Replacement for the httpx.Client class that routes requests by URL prefix.

    A route maps to either a MockResponse or an exception to raise. Every
    requested URL and every timeout the client was built with is recorded.
    """

    def __init__(self, routes: dict[str, MockResponse | Exception] | None = None) -> None:
        self.routes = routes or {}
        self.calls: list[str] = []
        self.timeouts: list[httpx.Timeout] = []

    def __call__(self, *args: Any, timeout: httpx.Timeout | None = None, **kwargs: Any) -> MockClient:
        self.timeouts.append(timeout)
        return MockClient(self)

    def answer(self, url: str) -> MockResponse:
        self.calls.append(url)
        for prefix, outcome in self.routes.items():
            if url.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise httpx.ConnectError("No route", request=httpx.Request("GET", url))


def connect_error(url: str) -> httpx.ConnectError:
    return httpx.ConnectError("Network failure", request=httpx.Request("GET", url))


def city_entry(ip: str, status: str = "OK", **overrides: Any) -> dict[str, Any]:
    entry = {
        "Ip": ip,
        "Status": status,
        "CountryCode": "US",
        "CountryName": "United States",
        "RegionCode": "06",
        "RegionName": "California",
        "City": "Mountain View",
        "ZipPostalCode": "94043",
        "Latitude": "37.4192",
        "Longitude": "-122.057",
        "Timezone": "-8",
    }
    entry.update(overrides)
    return entry


def country_entry(ip: str, status: str = "OK", **overrides: Any) -> dict[str, Any]:
    entry = {"Ip": ip, "Status": status, "CountryCode": "US", "CountryName": "United States"}
    entry.update(overrides)
    return entry


def ok_response(*entries: dict[str, Any]) -> MockResponse:
    return MockResponse(status_code=HTTPStatus.OK, payload={"Locations": list(entries)})
