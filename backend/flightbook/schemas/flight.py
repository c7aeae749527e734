from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from flightbook.models.enums import SeatClass
from flightbook.schemas.common import UTCModel


class FareOptionIn(BaseModel):
    seat_class: SeatClass
    price: float = Field(..., gt=0)
    capacity: int = Field(..., ge=0)
    seats_available: int | None = Field(None, ge=0)
    perks: list[str] = Field(default_factory=list)


class FlightCreate(UTCModel):
    flight_number: str = Field(..., min_length=1, max_length=32)
    airline: str = Field(..., min_length=1)
    aircraft: str | None = None
    aircraft_id: int | None = Field(None, description="Registered aircraft whose seat layout bounds this flight")
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    departure: datetime
    arrival: datetime
    price: float = Field(..., ge=0)
    seats_total: int | None = Field(None, ge=0, description="Defaults to the sum of fare option capacities")
    seats_available: int | None = Field(None, ge=0, description="Defaults to seats_total")
    stops: int = Field(0, ge=0)
    fare_options: list[FareOptionIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check(self):
        if self.arrival <= self.departure:
            raise ValueError("arrival must be after departure")
        classes = [fo.seat_class for fo in self.fare_options]
        if len(classes) != len(set(classes)):
            raise ValueError("duplicate fare class")
        return self


class FlightUpdate(UTCModel):
    flight_number: str | None = Field(None, min_length=1, max_length=32)
    airline: str | None = None
    aircraft: str | None = None
    aircraft_id: int | None = None
    origin: str | None = None
    destination: str | None = None
    departure: datetime | None = None
    arrival: datetime | None = None
    price: float | None = Field(None, ge=0)
    seats_total: int | None = Field(None, ge=0)
    seats_available: int | None = Field(None, ge=0)
    stops: int | None = Field(None, ge=0)
    is_active: bool | None = None


class FareOptionOut(BaseModel):
    seat_class: str
    price: float
    capacity: int
    seats_available: int
    perks: list[str]


class FlightOut(BaseModel):
    id: int
    flight_number: str
    airline: str
    aircraft: str | None
    aircraft_id: int | None
    origin: str
    destination: str
    departure: datetime
    arrival: datetime
    duration_minutes: int
    price: float
    seats_total: int
    seats_available: int
    stops: int
    is_active: bool
    fare_options: list[FareOptionOut]
