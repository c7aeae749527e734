from datetime import datetime
from pydantic import BaseModel, Field

from flightbook.models.enums import BookingStatus, PaymentStatus, SeatClass
from flightbook.schemas.common import UTCModel


class BookingCreate(BaseModel):
    flight_id: int
    quantity: int = Field(1, ge=1, le=10, description="Number of seats to book (1-10)")
    seat_class: SeatClass | None = None
    user_id: int | None = Field(None, description="Admins may book on behalf of another user")


class BookingUpdate(BaseModel):
    status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None


class BookingSearch(UTCModel):
    user_id: int | None = None
    flight_id: int | None = None
    status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)


class BookingOut(BaseModel):
    id: int
    user_id: int
    flight_id: int
    seat_class: str | None
    quantity: int
    total_price: float
    status: str
    payment_status: str
    booking_time: datetime
