from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Precision(str, Enum):
    """Granularity of a lookup: full city detail or country only."""

    CITY = "city"
    COUNTRY = "country"


class TimeoutKind(str, Enum):
    """Which of the two transport timeouts a setter call targets."""

    CONNECT = "connect"
    TRANSFER = "transfer"


class Location(BaseModel):
    """Geolocation record for one resolved address.

    All records produced by one lookup carry the precision requested for that
    lookup. At country precision every city-level field stays None.
    """

    model_config = ConfigDict(frozen=True)

    ip_address: str
    precision: Precision
    country_code: str
    country_name: str
    region: str | None = None
    city: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    timezone_offset: float | None = None

    @field_validator("latitude", "longitude", "timezone_offset", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> float | None:
        """Parse numeric fields from their textual form in the response document.

        Blank or malformed text becomes None rather than failing the whole record.
        """
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        try:
            # For general GPS and mapping, 5-6 decimal places (e.g., 34.052235)
            return round(float(value), 6)
        except (TypeError, ValueError):
            return None
