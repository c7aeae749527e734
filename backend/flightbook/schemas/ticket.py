from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, Field

from flightbook.models.enums import SeatClass, TicketStatus


class Passenger(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    date_of_birth: date
    gender: Literal["male", "female", "other"]
    nationality: str = Field(..., min_length=1)
    passport_number: str | None = None
    id_number: str | None = None


class TicketItem(BaseModel):
    seat_number: str = Field(..., min_length=1, max_length=8)
    passenger: Passenger
    # positivity is a business rule checked by the service, after seat checks
    price: float
    status: TicketStatus = TicketStatus.unused


class TicketCreate(TicketItem):
    booking_id: int
    flight_id: int
    seat_class: SeatClass | None = None


class TicketBatchCreate(BaseModel):
    booking_id: int
    flight_id: int
    seat_class: SeatClass | None = None
    tickets: list[TicketItem] = Field(..., min_length=1)


class TicketUpdate(BaseModel):
    seat_number: str | None = Field(None, min_length=1, max_length=8)
    status: TicketStatus | None = None
    price: float | None = None
    passenger: Passenger | None = None


class TicketOut(BaseModel):
    id: int
    booking_id: int
    flight_id: int
    user_id: int
    seat_class: str | None
    seat_number: str
    price: float
    status: str
    passenger: Passenger
    created_at: datetime
    updated_at: datetime


class CancellationCheck(BaseModel):
    can_cancel: bool
    hours_until_departure: float
