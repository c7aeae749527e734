from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from flightbook.models.enums import AircraftStatus, SeatClass


class SeatLayout(BaseModel):
    rows: int = Field(..., gt=0)
    seats_per_row: int = Field(..., gt=0)


class AircraftCreate(BaseModel):
    aircraft_code: str = Field(..., min_length=1, max_length=32)
    model: str = Field(..., min_length=1)
    manufacturer: str = Field(..., min_length=1)
    seat_configuration: dict[SeatClass, SeatLayout]
    status: AircraftStatus = AircraftStatus.active

    @field_validator("seat_configuration")
    @classmethod
    def _at_least_one_class(cls, v):
        if not v:
            raise ValueError("at least one seat class must be configured")
        return v


class AircraftUpdate(BaseModel):
    model: str | None = Field(None, min_length=1)
    manufacturer: str | None = Field(None, min_length=1)
    seat_configuration: dict[SeatClass, SeatLayout] | None = None
    status: AircraftStatus | None = None

    @field_validator("seat_configuration")
    @classmethod
    def _at_least_one_class(cls, v):
        if v is not None and not v:
            raise ValueError("at least one seat class must be configured")
        return v


class AircraftOut(BaseModel):
    id: int
    aircraft_code: str
    model: str
    manufacturer: str
    seat_configuration: dict[str, SeatLayout]
    capacity: int
    status: str
    created_at: datetime
