from typing import Any

from geolocator.models.common import Location, Precision

STATUS_OK = "OK"


def entry_is_ok(entry: dict[str, Any]) -> bool:
    """Whether the service reported a successful resolution for this entry."""
    return str(entry.get("Status") or "") == STATUS_OK


def entry_status(entry: dict[str, Any]) -> str:
    return str(entry.get("Status") or "UNKNOWN")


def parse_location(entry: dict[str, Any], precision: Precision) -> Location:
    """Map one entry of the "Locations" array into a Location.

    The response does not say which precision it was produced at, so the caller
    passes the precision that was active when the request went out. Numeric
    fields are passed through as-is; the Location model coerces them from text.
    """
    ip_address = str(entry.get("Ip") or "")
    country_code = str(entry.get("CountryCode") or "")
    country_name = str(entry.get("CountryName") or "")

    if precision == Precision.COUNTRY:
        return Location(
            ip_address=ip_address,
            precision=precision,
            country_code=country_code,
            country_name=country_name,
        )

    return Location(
        ip_address=ip_address,
        precision=precision,
        country_code=country_code,
        country_name=country_name,
        region=str(entry.get("RegionName") or "") or None,
        city=str(entry.get("City") or "") or None,
        postal_code=str(entry.get("ZipPostalCode") or "") or None,
        latitude=entry.get("Latitude"),
        longitude=entry.get("Longitude"),
        timezone_offset=entry.get("Timezone"),
    )
