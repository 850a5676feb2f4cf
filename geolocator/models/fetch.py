from typing import Any

from pydantic import BaseModel, ConfigDict


class FetchSuccess(BaseModel):
    """A decoded response document obtained from `endpoint`."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    document: dict[str, Any]


class FetchFailure(BaseModel):
    """Why a request against `endpoint` did not yield a usable document."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    reason: str


FetchResult = FetchSuccess | FetchFailure
