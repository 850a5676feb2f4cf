class GeolocatorError(Exception):
    """Base error for the IP geolocator client."""


class InvalidConfigurationError(GeolocatorError):
    """Raised when a setter receives a precision, timeout or flag it cannot accept."""


class LookupFailureError(GeolocatorError):
    """Raised when neither the primary nor the backup endpoint produced a usable response."""
