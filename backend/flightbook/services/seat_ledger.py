"""Seat inventory for a flight.

Every seat-count mutation and check used by bookings and tickets goes through
this module, so a flight has exactly one seat pool:

* bookings debit and credit ``flights.seats_available`` (and the fare option
  pool when a class was booked) with single guarded UPDATE statements;
* tickets never touch the flight counters again, they draw from the seats
  their booking already holds.

Check-then-insert sequences on one flight are serialised by ``flight_locks``
(in-process) together with ``SELECT ... FOR UPDATE`` on the booking row, and
seat-number uniqueness is additionally enforced by a partial unique index.
"""
from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
from typing import Iterable, Iterator

from sqlalchemy import case, func, select, text, update
from sqlalchemy.orm import Session

from flightbook.core.exceptions import DomainError, ErrorCode
from flightbook.models.booking import Booking
from flightbook.models.enums import TicketStatus
from flightbook.models.flight import FareOption, Flight
from flightbook.models.ticket import Ticket

logger = logging.getLogger(__name__)


class FlightLockRegistry:
    """One mutual-exclusion token per flight id."""

    def __init__(self) -> None:
        self._locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, flight_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(flight_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[flight_id] = lock
            return lock

    @contextmanager
    def hold(self, flight_id: int) -> Iterator[None]:
        lock = self.get(flight_id)
        with lock:
            yield

    def discard(self, flight_id: int) -> None:
        with self._guard:
            self._locks.pop(flight_id, None)


flight_locks = FlightLockRegistry()


def debit(db: Session, flight_id: int, quantity: int, seat_class: str | None = None) -> bool:
    """Take ``quantity`` seats from the flight pool (and the class pool).

    Each statement re-checks availability at write time. Returns False when a
    pool no longer holds enough seats; the caller must roll back.
    """
    row = db.execute(
        text(
            """
            UPDATE flights
            SET seats_available = seats_available - :qty
            WHERE id = :fid AND seats_available >= :qty
            RETURNING seats_available
            """
        ),
        {"qty": quantity, "fid": flight_id},
    ).fetchone()
    if row is None:
        return False
    if seat_class is not None:
        fare_row = db.execute(
            text(
                """
                UPDATE fare_options
                SET seats_available = seats_available - :qty
                WHERE flight_id = :fid AND seat_class = :cls AND seats_available >= :qty
                RETURNING seats_available
                """
            ),
            {"qty": quantity, "fid": flight_id, "cls": seat_class},
        ).fetchone()
        if fare_row is None:
            return False
    logger.info("debited %s seat(s) on flight %s (class=%s), %s left", quantity, flight_id, seat_class, row[0])
    return True


def credit(db: Session, flight_id: int, quantity: int, seat_class: str | None = None) -> None:
    """Return seats to the flight pool, never above the configured capacity."""
    restored = Flight.seats_available + quantity
    db.execute(
        update(Flight)
        .where(Flight.id == flight_id)
        .values(seats_available=case((restored > Flight.seats_total, Flight.seats_total), else_=restored))
        .execution_options(synchronize_session=False)
    )
    if seat_class is not None:
        restored_fare = FareOption.seats_available + quantity
        db.execute(
            update(FareOption)
            .where(FareOption.flight_id == flight_id, FareOption.seat_class == seat_class)
            .values(seats_available=case((restored_fare > FareOption.capacity, FareOption.capacity), else_=restored_fare))
            .execution_options(synchronize_session=False)
        )
    logger.info("credited %s seat(s) on flight %s (class=%s)", quantity, flight_id, seat_class)


def lock_booking(db: Session, booking_id: int) -> Booking | None:
    """Re-read a booking from the database, holding a row lock until the transaction ends.

    ``populate_existing`` overwrites the copy already in the session, so callers
    see writes committed by other sessions while they waited for the flight lock.
    The row lock is a no-op on SQLite.
    """
    return db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def count_active_tickets(db: Session, *, flight_id: int | None = None, booking_id: int | None = None) -> int:
    q = select(func.count(Ticket.id)).where(Ticket.status != TicketStatus.cancelled.value)
    if flight_id is not None:
        q = q.where(Ticket.flight_id == flight_id)
    if booking_id is not None:
        q = q.where(Ticket.booking_id == booking_id)
    return db.execute(q).scalar_one()


def ensure_seats_free(
    db: Session, flight_id: int, seat_numbers: Iterable[str], exclude_ticket_id: int | None = None
) -> None:
    seat_numbers = list(seat_numbers)
    q = select(Ticket.seat_number).where(
        Ticket.flight_id == flight_id,
        Ticket.seat_number.in_(seat_numbers),
        Ticket.status != TicketStatus.cancelled.value,
    )
    if exclude_ticket_id is not None:
        q = q.where(Ticket.id != exclude_ticket_id)
    taken = sorted(db.execute(q).scalars().all())
    if not taken:
        return
    if len(seat_numbers) == 1:
        raise DomainError("Seat is already booked", ErrorCode.SEAT_ALREADY_BOOKED)
    raise DomainError(f"Seats already booked: {', '.join(taken)}", ErrorCode.SEAT_ALREADY_BOOKED)


def ensure_allocation(db: Session, booking: Booking, requested: int) -> None:
    """Tickets of a booking may not outnumber the seats the booking debited."""
    issued = count_active_tickets(db, booking_id=booking.id)
    if issued + requested > booking.quantity:
        raise DomainError(
            f"Not enough available seats (Available: {booking.quantity - issued}, Requested: {requested})",
            ErrorCode.INSUFFICIENT_SEATS,
        )


def seat_summary(db: Session, flight: Flight) -> dict:
    assigned = count_active_tickets(db, flight_id=flight.id)
    booked = flight.seats_total - flight.seats_available
    return {
        "flight_id": flight.id,
        "seats_total": flight.seats_total,
        "seats_available": flight.seats_available,
        "assigned_seats": assigned,
        "unassigned_seats": max(0, booked - assigned),
        "fare_options": [
            {"seat_class": fo.seat_class, "capacity": fo.capacity, "seats_available": fo.seats_available}
            for fo in flight.fare_options
        ],
    }
