"""Booking lifecycle: create, update, delete, search, stats.

A booking and its seat debit are written in one transaction; cancelling or
deleting a booking credits the seats back through the seat ledger.
"""
import logging
from decimal import Decimal

from sqlalchemy import delete, func, update
from sqlalchemy.orm import Session

from flightbook.core.clock import utcnow
from flightbook.core.exceptions import DomainError, ErrorCode, NotFoundError
from flightbook.models.booking import Booking
from flightbook.models.enums import BookingStatus, PaymentStatus
from flightbook.models.flight import FareOption, Flight
from flightbook.models.ticket import Ticket
from flightbook.models.user import User
from flightbook.schemas.booking import BookingSearch, BookingUpdate
from flightbook.services import seat_ledger
from flightbook.services.pagination import paginate

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (BookingStatus.confirmed.value, BookingStatus.cancelled.value)

SORTABLE_FIELDS = {
    "booking_time": Booking.booking_time,
    "total_price": Booking.total_price,
    "quantity": Booking.quantity,
    "status": Booking.status,
}


def get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", ErrorCode.BOOKING_NOT_FOUND)
    return booking


def _fare_option(db: Session, flight_id: int, seat_class: str) -> FareOption | None:
    return (
        db.query(FareOption)
        .filter(FareOption.flight_id == flight_id, FareOption.seat_class == seat_class)
        .first()
    )


def create_booking(db: Session, user_id: int, flight_id: int, quantity: int, seat_class: str | None = None) -> Booking:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)
    flight = db.get(Flight, flight_id)
    if not flight:
        raise NotFoundError("Flight not found", ErrorCode.FLIGHT_NOT_FOUND)

    unit_price = flight.price
    available = flight.seats_available
    if seat_class is not None:
        fare = _fare_option(db, flight_id, seat_class)
        if not fare:
            raise DomainError(f"Seat class '{seat_class}' is not offered on this flight", ErrorCode.FARE_CLASS_NOT_FOUND)
        unit_price = fare.price
        available = min(available, fare.seats_available)
    if available < quantity:
        raise DomainError("Not enough available seats", ErrorCode.INSUFFICIENT_SEATS)

    booking = Booking(
        user_id=user_id,
        flight_id=flight_id,
        seat_class=seat_class,
        quantity=quantity,
        total_price=Decimal(str(unit_price)) * quantity,
        status=BookingStatus.pending.value,
        payment_status=PaymentStatus.pending.value,
    )
    with seat_ledger.flight_locks.hold(flight_id):
        db.add(booking)
        db.flush()
        # Re-checked at write time; losing the race discards the insert as well.
        if not seat_ledger.debit(db, flight_id, quantity, seat_class):
            db.rollback()
            logger.warning("seat debit lost the race on flight %s (qty=%s)", flight_id, quantity)
            raise DomainError("Unable to update seat count, please retry", ErrorCode.SEAT_COUNT_CONFLICT)
        db.commit()
    db.refresh(booking)
    logger.info("booking %s created: user=%s flight=%s qty=%s", booking.id, user_id, flight_id, quantity)
    return booking


def _locked_booking(db: Session, booking_id: int) -> Booking:
    booking = seat_ledger.lock_booking(db, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found", ErrorCode.BOOKING_NOT_FOUND)
    return booking


def _check_updatable(booking: Booking, patch: BookingUpdate) -> None:
    if booking.status in TERMINAL_STATUSES:
        raise DomainError("Cannot update a booking that is already confirmed or cancelled", ErrorCode.BOOKING_TERMINAL)
    if patch.status == BookingStatus.confirmed and booking.payment_status != PaymentStatus.success.value:
        raise DomainError("Booking must be paid before confirmation", ErrorCode.BOOKING_NOT_PAID)


def _check_deletable(booking: Booking) -> None:
    if booking.status in TERMINAL_STATUSES:
        raise DomainError("Cannot delete a booking that is confirmed or cancelled", ErrorCode.BOOKING_TERMINAL)
    if booking.payment_status == PaymentStatus.success.value:
        raise DomainError("Cannot delete a paid booking", ErrorCode.BOOKING_PAID)


def update_booking(db: Session, booking_id: int, patch: BookingUpdate) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    _check_updatable(booking, patch)

    releasing = patch.status == BookingStatus.cancelled
    with seat_ledger.flight_locks.hold(booking.flight_id):
        # another request may have cancelled or confirmed it while we waited
        booking = _locked_booking(db, booking_id)
        _check_updatable(booking, patch)
        if releasing and seat_ledger.count_active_tickets(db, booking_id=booking.id):
            raise DomainError("Cancel the booking's tickets before cancelling the booking", ErrorCode.BOOKING_HAS_TICKETS)

        values = {"updated_at": utcnow()}
        if patch.status is not None:
            values["status"] = patch.status.value
        if patch.payment_status is not None:
            values["payment_status"] = patch.payment_status.value
        claimed = db.execute(
            update(Booking)
            .where(Booking.id == booking.id, Booking.status == BookingStatus.pending.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        ).rowcount
        if claimed != 1:
            db.rollback()
            raise DomainError("Cannot update a booking that is already confirmed or cancelled", ErrorCode.BOOKING_TERMINAL)
        if releasing:
            seat_ledger.credit(db, booking.flight_id, booking.quantity, booking.seat_class)
        db.commit()
    db.refresh(booking)
    logger.info("booking %s updated: status=%s payment=%s", booking.id, booking.status, booking.payment_status)
    return booking


def delete_booking(db: Session, booking_id: int) -> None:
    booking = get_booking_or_404(db, booking_id)
    _check_deletable(booking)

    with seat_ledger.flight_locks.hold(booking.flight_id):
        booking = _locked_booking(db, booking_id)
        _check_deletable(booking)
        if seat_ledger.count_active_tickets(db, booking_id=booking.id):
            raise DomainError("Cannot delete a booking with issued tickets", ErrorCode.BOOKING_HAS_TICKETS)
        flight_id, quantity, seat_class = booking.flight_id, booking.quantity, booking.seat_class
        db.query(Ticket).filter(Ticket.booking_id == booking.id).delete(synchronize_session=False)
        removed = db.execute(
            delete(Booking)
            .where(
                Booking.id == booking.id,
                Booking.status == BookingStatus.pending.value,
                Booking.payment_status != PaymentStatus.success.value,
            )
            .execution_options(synchronize_session=False)
        ).rowcount
        if removed != 1:
            db.rollback()
            raise DomainError("Cannot delete a booking that is confirmed or cancelled", ErrorCode.BOOKING_TERMINAL)
        seat_ledger.credit(db, flight_id, quantity, seat_class)
        db.commit()
    db.expunge(booking)
    logger.info("booking %s deleted, %s seat(s) returned to flight %s", booking_id, quantity, flight_id)


def get_booking_detail(db: Session, booking_id: int) -> tuple[Booking, User | None, Flight | None]:
    booking = get_booking_or_404(db, booking_id)
    return booking, db.get(User, booking.user_id), db.get(Flight, booking.flight_id)


def _ordered(q, sort_by: str, sort_order: str):
    col = SORTABLE_FIELDS.get(sort_by, Booking.booking_time)
    return q.order_by(col.desc() if sort_order == "desc" else col.asc(), Booking.id.asc())


def search_bookings(
    db: Session, filters: BookingSearch, page: int, limit: int, sort_by: str = "booking_time", sort_order: str = "desc"
) -> tuple[list[Booking], dict]:
    q = db.query(Booking)
    if filters.user_id is not None:
        q = q.filter(Booking.user_id == filters.user_id)
    if filters.flight_id is not None:
        q = q.filter(Booking.flight_id == filters.flight_id)
    if filters.status is not None:
        q = q.filter(Booking.status == filters.status.value)
    if filters.payment_status is not None:
        q = q.filter(Booking.payment_status == filters.payment_status.value)
    if filters.start_date is not None:
        q = q.filter(Booking.booking_time >= filters.start_date)
    if filters.end_date is not None:
        q = q.filter(Booking.booking_time <= filters.end_date)
    if filters.min_price is not None:
        q = q.filter(Booking.total_price >= filters.min_price)
    if filters.max_price is not None:
        q = q.filter(Booking.total_price <= filters.max_price)
    return paginate(_ordered(q, sort_by, sort_order), page, limit)


def list_bookings(db: Session, page: int, limit: int, order: str = "asc") -> tuple[list[Booking], dict]:
    return paginate(_ordered(db.query(Booking), "total_price", order), page, limit)


def list_user_bookings(db: Session, user_id: int, page: int, limit: int, order: str = "desc") -> tuple[list[Booking], dict]:
    q = db.query(Booking).filter(Booking.user_id == user_id)
    return paginate(_ordered(q, "booking_time", order), page, limit)


def booking_stats(db: Session) -> dict:
    by_status = dict(db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all())
    by_payment = dict(db.query(Booking.payment_status, func.count(Booking.id)).group_by(Booking.payment_status).all())
    revenue = (
        db.query(func.coalesce(func.sum(Booking.total_price), 0))
        .filter(Booking.payment_status == PaymentStatus.success.value)
        .scalar()
    )
    return {
        "total_bookings": sum(by_status.values()),
        "status_stats": {s.value: by_status.get(s.value, 0) for s in BookingStatus},
        "payment_stats": {s.value: by_payment.get(s.value, 0) for s in PaymentStatus},
        "total_revenue": float(revenue or 0),
    }
