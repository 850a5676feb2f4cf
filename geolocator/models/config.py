from pydantic import BaseModel, ConfigDict, Field, StrictBool

from geolocator.models.common import Precision

DEFAULT_CONNECT_TIMEOUT_SECONDS = 2.0
DEFAULT_TRANSFER_TIMEOUT_SECONDS = 3.0


class LocatorConfig(BaseModel):
    """Immutable configuration of a LocatorClient.

    Setters on the client never mutate an instance; they build a new, fully
    validated one and swap it in, so a rejected value leaves the old config intact.
    """

    model_config = ConfigDict(frozen=True)

    precision: Precision = Precision.CITY
    connect_timeout_seconds: float = Field(default=DEFAULT_CONNECT_TIMEOUT_SECONDS, ge=0)
    transfer_timeout_seconds: float = Field(default=DEFAULT_TRANSFER_TIMEOUT_SECONDS, ge=0)
    use_backup_first: StrictBool = False

    def replace(self, **changes: object) -> "LocatorConfig":
        """Return a validated copy with `changes` applied.

        `model_copy(update=...)` skips validation, so the copy is rebuilt from a dump.
        """
        return LocatorConfig(**{**self.model_dump(), **changes})
