from datetime import datetime
from pydantic import BaseModel

from flightbook.models.enums import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    booking_id: int
    method: PaymentMethod = PaymentMethod.card


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    transaction_id: str | None = None


class PaymentOut(BaseModel):
    id: int
    booking_id: int
    user_id: int
    amount: float
    method: str
    status: str
    transaction_id: str | None
    payment_date: datetime | None
    created_at: datetime
