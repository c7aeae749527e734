from sqlalchemy import String, Integer, ForeignKey, DateTime, Numeric, Boolean, JSON, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime

from flightbook.core.clock import utcnow
from flightbook.models.base import Base

class Flight(Base):
    __tablename__ = "flights"
    __table_args__ = (
        CheckConstraint("seats_available >= 0", name="ck_flights_seats_non_negative"),
        CheckConstraint("seats_available <= seats_total", name="ck_flights_seats_within_capacity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    flight_number: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    airline: Mapped[str] = mapped_column(String(120))
    aircraft: Mapped[str | None] = mapped_column(String(120), nullable=True)
    aircraft_id: Mapped[int | None] = mapped_column(ForeignKey("aircrafts.id"), nullable=True, index=True)
    origin: Mapped[str] = mapped_column(String(64), index=True)
    destination: Mapped[str] = mapped_column(String(64), index=True)
    departure: Mapped[datetime] = mapped_column(DateTime)
    arrival: Mapped[datetime] = mapped_column(DateTime)
    price: Mapped[float] = mapped_column(Numeric(10, 2))
    seats_total: Mapped[int] = mapped_column(Integer)
    seats_available: Mapped[int] = mapped_column(Integer)
    stops: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    fare_options: Mapped[list["FareOption"]] = relationship(
        back_populates="flight", cascade="all, delete-orphan", order_by="FareOption.id"
    )

    @property
    def duration_minutes(self) -> int:
        return int((self.arrival - self.departure).total_seconds() // 60)


class FareOption(Base):
    """A priced seating class on a flight with its own seat pool."""

    __tablename__ = "fare_options"
    __table_args__ = (
        UniqueConstraint("flight_id", "seat_class", name="uq_fare_option_class"),
        CheckConstraint("seats_available >= 0", name="ck_fare_seats_non_negative"),
        CheckConstraint("seats_available <= capacity", name="ck_fare_seats_within_capacity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    flight_id: Mapped[int] = mapped_column(ForeignKey("flights.id", ondelete="CASCADE"), index=True)
    seat_class: Mapped[str] = mapped_column(String(32))  # economy | business | firstClass
    price: Mapped[float] = mapped_column(Numeric(10, 2))
    capacity: Mapped[int] = mapped_column(Integer)
    seats_available: Mapped[int] = mapped_column(Integer)
    perks: Mapped[list[str]] = mapped_column(JSON, default=list)

    flight: Mapped[Flight] = relationship(back_populates="fare_options")
