from fastapi.testclient import TestClient

from geolocator.errors import LookupFailureError
from geolocator.locator_client import LocatorClient
from geolocator.main import LocatorClientFactory, app, get_locator_client_factory
from geolocator.models.common import Location, Precision


class _StubLocatorClient(LocatorClient):
    """Test double for LocatorClient that never goes over the network."""

    def __init__(self, results: dict[str, Location | None] | None = None, exc: Exception | None = None) -> None:
        super().__init__()
        self._results = results or {}
        self._exc = exc
        self.factory_kwargs: dict = {}

    def get_all_locations(self) -> dict[str, Location | None]:
        if self._exc is not None:
            raise self._exc
        return {key: self._results.get(key) for key in self.get_addresses()}


def _call_locations(stub: _StubLocatorClient, query: str) -> tuple[int, dict]:
    """Helper that wires a stub client and calls the /v1/ip/locations endpoint."""

    def _factory(precision: Precision, use_backup_first: bool) -> LocatorClient:
        stub.factory_kwargs = {"precision": precision, "use_backup_first": use_backup_first}
        return stub

    app.dependency_overrides[get_locator_client_factory] = lambda: _factory
    client = TestClient(app)
    try:
        response = client.get(f"/v1/ip/locations?{query}")
        return response.status_code, response.json()
    finally:
        app.dependency_overrides.clear()


def test_health() -> None:
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_locations_returns_results_in_request_order() -> None:
    location = Location(
        ip_address="8.8.8.8",
        precision=Precision.CITY,
        country_code="US",
        country_name="United States",
        city="Mountain View",
        latitude="37.4192",
    )
    stub = _StubLocatorClient(results={"8.8.8.8": location})

    status_code, body = _call_locations(stub, "ip=Example.com&ip=8.8.8.8")

    assert status_code == 200
    assert body["precision"] == "city"
    assert list(body["locations"]) == ["example.com", "8.8.8.8"]
    assert body["locations"]["example.com"] is None
    assert body["locations"]["8.8.8.8"]["city"] == "Mountain View"
    assert body["locations"]["8.8.8.8"]["latitude"] == 37.4192


def test_locations_accepts_comma_separated_values_and_options() -> None:
    stub = _StubLocatorClient()

    status_code, body = _call_locations(stub, "ip=8.8.8.8,8.8.4.4&precision=country&backup_first=true")

    assert status_code == 200
    assert body["precision"] == "country"
    assert list(body["locations"]) == ["8.8.8.8", "8.8.4.4"]
    assert stub.factory_kwargs == {"precision": Precision.COUNTRY, "use_backup_first": True}


def test_locations_rejects_more_than_25_addresses() -> None:
    query = "&".join(f"ip=192.0.2.{i}" for i in range(26))

    status_code, body = _call_locations(_StubLocatorClient(), query)

    assert status_code == 400
    assert body["detail"]["code"] == "too_many_addresses"


def test_locations_maps_lookup_failure_to_502() -> None:
    stub = _StubLocatorClient(exc=LookupFailureError("Both endpoints failed"))

    status_code, body = _call_locations(stub, "ip=8.8.8.8")

    assert status_code == 502
    assert body["detail"]["code"] == "upstream_error"
    assert "Both endpoints failed" in body["detail"]["message"]


def test_locations_requires_ip() -> None:
    status_code, body = _call_locations(_StubLocatorClient(), "precision=city")

    assert status_code == 400
    assert body["code"] == "missing_ip"


def test_locations_rejects_unknown_precision() -> None:
    status_code, body = _call_locations(_StubLocatorClient(), "ip=8.8.8.8&precision=street")

    assert status_code == 400
    assert body["code"] == "invalid_precision"
    assert body["precision"] == "street"


def test_factory_builds_configured_client() -> None:
    client = LocatorClientFactory()(precision=Precision.COUNTRY, use_backup_first=True)

    assert client.config.precision == Precision.COUNTRY
    assert client.config.use_backup_first is True
    assert client.address_count() == 0
