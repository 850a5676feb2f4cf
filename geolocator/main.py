from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError

from geolocator.address_set import MAX_ADDRESSES
from geolocator.errors import LookupFailureError
from geolocator.exception_handlers import (
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from geolocator.locator_client import LocatorClient
from geolocator.logger import logger
from geolocator.models.common import Precision
from geolocator.models.response_models import HealthResponse, LocationsResponse

app = FastAPI(
    title="IP Geolocator",
    version="0.1.0",
    description="Batch IP/hostname geolocation with primary/backup failover.",
)
logger.info("Started IP Geolocator")


class LocatorClientFactory:
    """Builds a fresh, configured LocatorClient for each request.

    Clients hold per-lookup state and are not safe to share between requests.
    """

    def __call__(self, precision: Precision, use_backup_first: bool) -> LocatorClient:
        client = LocatorClient()
        client.set_precision(precision)
        client.set_use_backup_first(use_backup_first)
        return client


def get_locator_client_factory() -> LocatorClientFactory:
    """Dependency to provide a LocatorClientFactory instance."""
    return LocatorClientFactory()


app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get(
    "/v1/ip/locations",
    response_model=LocationsResponse,
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for up to 25 IP addresses or hostnames.",
)
def ip_locations(
    request: Request,
    ip: Annotated[
        list[str],
        Query(
            description="IP address or hostname; repeat the parameter or comma-separate values.",
            examples=["8.8.8.8", "8.8.4.4,example.com"],
        ),
    ],
    client_factory: Annotated[LocatorClientFactory, Depends(get_locator_client_factory)],
    precision: Precision = Precision.CITY,
    backup_first: bool = False,
) -> LocationsResponse:
    """Resolve every supplied address in a single upstream batch request.

    Addresses are normalized (lower-cased, trimmed) and de-duplicated; the
    response is keyed by the normalized form in request order. Addresses the
    upstream could not resolve map to null.
    """
    raw_addresses = [part for value in ip for part in value.split(",") if part.strip()]
    locator = client_factory(precision=precision, use_backup_first=backup_first)

    if not all(locator.add_address(address) for address in raw_addresses):
        logger.info(
            "Rejected lookup over address limit "
            f"path={request.url.path} method={request.method} count={len(raw_addresses)} precision={precision}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "too_many_addresses",
                "message": f"At most {MAX_ADDRESSES} distinct addresses can be looked up at once.",
                "precision": precision.value,
            },
        )

    logger.info(
        "Performing batch lookup "
        f"path={request.url.path} method={request.method} ips={locator.get_addresses()} "
        f"precision={precision} backup_first={backup_first}"
    )
    try:
        locations = locator.get_all_locations()
    except LookupFailureError as exc:
        logger.exception(
            "Upstream location service error during lookup "
            f"path={request.url.path} method={request.method} precision={precision} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "code": "upstream_error",
                "message": str(exc),
                "precision": precision.value,
            },
        ) from exc

    return LocationsResponse(precision=precision, locations=locations)
