from pydantic import BaseModel

from geolocator.models.common import Location, Precision


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class LocationsResponse(BaseModel):
    """Response model for a batch lookup, keyed by normalized address in request order."""

    precision: Precision
    locations: dict[str, Location | None]
