from sqlalchemy import String, Integer, ForeignKey, DateTime, Numeric, Date, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime

from flightbook.core.clock import utcnow
from flightbook.models.base import Base

class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        # A seat can be held by at most one live ticket per flight.
        Index(
            "uq_tickets_active_seat",
            "flight_id",
            "seat_number",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), index=True)
    flight_id: Mapped[int] = mapped_column(ForeignKey("flights.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    seat_class: Mapped[str | None] = mapped_column(String(32), nullable=True)
    seat_number: Mapped[str] = mapped_column(String(8))
    price: Mapped[float] = mapped_column(Numeric(10, 2))
    status: Mapped[str] = mapped_column(String(32), default="unused", index=True)  # unused, used, cancelled
    passenger_name: Mapped[str] = mapped_column(String(255))
    passenger_email: Mapped[str] = mapped_column(String(255), index=True)
    passenger_phone: Mapped[str] = mapped_column(String(32))
    passenger_date_of_birth: Mapped[date] = mapped_column(Date)
    passenger_gender: Mapped[str] = mapped_column(String(16))
    passenger_nationality: Mapped[str] = mapped_column(String(64))
    passenger_passport_number: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    passenger_id_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
