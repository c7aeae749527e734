from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from flightbook.core.clock import utcnow
from flightbook.models.base import Base

class Aircraft(Base):
    """An airframe type with a fixed seat layout per seating class.

    ``seat_configuration`` maps a seat class to ``{"rows": int, "seats_per_row": int}``;
    a class missing from the map does not exist on this aircraft.
    """

    __tablename__ = "aircrafts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    aircraft_code: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    model: Mapped[str] = mapped_column(String(120))
    manufacturer: Mapped[str] = mapped_column(String(120))
    seat_configuration: Mapped[dict] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(32), default="active")  # active, maintenance, retired
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    def class_capacity(self, seat_class: str) -> int:
        layout = (self.seat_configuration or {}).get(seat_class)
        if not layout:
            return 0
        return layout["rows"] * layout["seats_per_row"]

    @property
    def capacity(self) -> int:
        return sum(self.class_capacity(c) for c in (self.seat_configuration or {}))
