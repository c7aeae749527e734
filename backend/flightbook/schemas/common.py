from datetime import datetime
from pydantic import BaseModel, field_validator

from flightbook.core.clock import to_naive_utc


class UTCModel(BaseModel):
    """Base for request bodies carrying datetimes: everything is stored as naive UTC."""

    @field_validator("*", mode="after")
    @classmethod
    def _normalize_datetimes(cls, v):
        if isinstance(v, datetime):
            return to_naive_utc(v)
        return v
