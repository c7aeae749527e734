import threading
from datetime import date

import pytest
from conftest import ensure_user, flight_seats, passenger, seed_flight, ticket_item
from sqlalchemy.exc import IntegrityError

from flightbook.core.exceptions import DomainError, ErrorCode, NotFoundError
from flightbook.db.session import SessionLocal
from flightbook.models.booking import Booking
from flightbook.models.enums import BookingStatus
from flightbook.models.ticket import Ticket
from flightbook.schemas.booking import BookingUpdate
from flightbook.schemas.ticket import TicketItem
from flightbook.services import bookings as booking_service
from flightbook.services import seat_ledger
from flightbook.services import tickets as ticket_service


def run_concurrently(*calls):
    """Run each callable in its own thread with its own session, released together."""
    barrier = threading.Barrier(len(calls))
    results: list = [None] * len(calls)

    def worker(i, fn):
        db = SessionLocal()
        try:
            barrier.wait()
            results[i] = fn(db)
        except DomainError as e:
            results[i] = e
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def new_booking(user_id, flight_id, quantity):
    db = SessionLocal()
    try:
        return booking_service.create_booking(db, user_id, flight_id, quantity).id
    finally:
        db.close()


def test_last_seat_booking_race():
    flight_id = seed_flight(seats=1)
    a = ensure_user("racer-a@example.com")
    b = ensure_user("racer-b@example.com")

    results = run_concurrently(
        lambda db: booking_service.create_booking(db, a, flight_id, 1),
        lambda db: booking_service.create_booking(db, b, flight_id, 1),
    )
    errors = [r for r in results if isinstance(r, DomainError)]
    assert len(errors) == 1
    assert errors[0].message in {"Not enough available seats", "Unable to update seat count, please retry"}
    assert flight_seats(flight_id) == 0

    db = SessionLocal()
    try:
        assert db.query(Booking).filter_by(flight_id=flight_id).count() == 1
    finally:
        db.close()


def test_last_allocated_seat_ticket_race():
    flight_id = seed_flight(seats=2)
    user_id = ensure_user("racer@example.com")
    booking_id = new_booking(user_id, flight_id, 2)
    db = SessionLocal()
    try:
        ticket_service.create_ticket(db, booking_id, flight_id, TicketItem.model_validate(ticket_item("1A")))
    finally:
        db.close()

    results = run_concurrently(
        lambda db: ticket_service.create_ticket(db, booking_id, flight_id, TicketItem.model_validate(ticket_item("1B"))),
        lambda db: ticket_service.create_ticket(db, booking_id, flight_id, TicketItem.model_validate(ticket_item("1C"))),
    )
    errors = [r for r in results if isinstance(r, DomainError)]
    assert len(errors) == 1
    assert errors[0].message.startswith("Not enough available seats")

    db = SessionLocal()
    try:
        assert seat_ledger.count_active_tickets(db, flight_id=flight_id) == 2
    finally:
        db.close()


def test_same_seat_race_across_bookings():
    flight_id = seed_flight(seats=4)
    first = new_booking(ensure_user("one@example.com"), flight_id, 1)
    second = new_booking(ensure_user("two@example.com"), flight_id, 1)

    results = run_concurrently(
        lambda db: ticket_service.create_ticket(db, first, flight_id, TicketItem.model_validate(ticket_item("1A"))),
        lambda db: ticket_service.create_ticket(db, second, flight_id, TicketItem.model_validate(ticket_item("1A"))),
    )
    errors = [r for r in results if isinstance(r, DomainError)]
    assert len(errors) == 1
    assert errors[0].message == "Seat is already booked"


def _raw_ticket(booking_id, flight_id, user_id, seat, status="unused"):
    p = passenger()
    return Ticket(
        booking_id=booking_id,
        flight_id=flight_id,
        user_id=user_id,
        seat_number=seat,
        price=100,
        status=status,
        passenger_name=p["name"],
        passenger_email=p["email"],
        passenger_phone=p["phone"],
        passenger_date_of_birth=date(1990, 5, 17),
        passenger_gender=p["gender"],
        passenger_nationality=p["nationality"],
    )


def test_unique_index_rejects_second_live_ticket_for_a_seat(db):
    flight_id = seed_flight(seats=4)
    user_id = ensure_user("index@example.com")
    booking_id = new_booking(user_id, flight_id, 3)

    db.add(_raw_ticket(booking_id, flight_id, user_id, "1A", status="cancelled"))
    db.add(_raw_ticket(booking_id, flight_id, user_id, "1A"))
    db.commit()

    db.add(_raw_ticket(booking_id, flight_id, user_id, "1A"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_flight_lock_registry():
    registry = seat_ledger.FlightLockRegistry()
    assert registry.get(1) is registry.get(1)
    assert registry.get(1) is not registry.get(2)

    lock = registry.get(1)
    with registry.hold(1):
        assert lock.locked()
        assert not registry.get(2).locked()
    assert not lock.locked()

    registry.discard(1)
    assert registry.get(1) is not lock


def test_credit_never_exceeds_capacity(db):
    flight_id = seed_flight(seats=3, seats_available=2)
    seat_ledger.credit(db, flight_id, 5)
    db.commit()
    assert flight_seats(flight_id) == 3


def test_debit_refuses_to_go_negative(db):
    flight_id = seed_flight(seats=2)
    assert seat_ledger.debit(db, flight_id, 3) is False
    assert seat_ledger.debit(db, flight_id, 2) is True
    db.commit()
    assert flight_seats(flight_id) == 0


def _held_copy(booking_id):
    """A second session that loaded the booking while it was still pending."""
    db = SessionLocal()
    booking = db.get(Booking, booking_id)
    assert booking.status == BookingStatus.pending.value
    return db


def test_second_cancel_does_not_credit_again():
    flight_id = seed_flight(seats=10)
    user_id = ensure_user("twice@example.com")
    booking_id = new_booking(user_id, flight_id, 3)
    new_booking(user_id, flight_id, 3)
    assert flight_seats(flight_id) == 4

    late = _held_copy(booking_id)
    first = SessionLocal()
    try:
        booking_service.update_booking(first, booking_id, BookingUpdate(status=BookingStatus.cancelled))
        with pytest.raises(DomainError) as exc:
            booking_service.update_booking(late, booking_id, BookingUpdate(status=BookingStatus.cancelled))
        assert exc.value.code == ErrorCode.BOOKING_TERMINAL
    finally:
        first.close()
        late.close()
    assert flight_seats(flight_id) == 7


def test_second_delete_does_not_credit_again():
    flight_id = seed_flight(seats=10)
    user_id = ensure_user("twice@example.com")
    booking_id = new_booking(user_id, flight_id, 3)
    new_booking(user_id, flight_id, 3)

    late = _held_copy(booking_id)
    first = SessionLocal()
    try:
        booking_service.delete_booking(first, booking_id)
        with pytest.raises(NotFoundError):
            booking_service.delete_booking(late, booking_id)
    finally:
        first.close()
        late.close()
    assert flight_seats(flight_id) == 7


def test_delete_after_concurrent_cancel_is_refused():
    flight_id = seed_flight(seats=10)
    booking_id = new_booking(ensure_user("mixed@example.com"), flight_id, 3)

    late = _held_copy(booking_id)
    first = SessionLocal()
    try:
        booking_service.update_booking(first, booking_id, BookingUpdate(status=BookingStatus.cancelled))
        with pytest.raises(DomainError) as exc:
            booking_service.delete_booking(late, booking_id)
        assert exc.value.code == ErrorCode.BOOKING_TERMINAL
    finally:
        first.close()
        late.close()
    assert flight_seats(flight_id) == 10


def test_tickets_refused_once_booking_cancelled():
    flight_id = seed_flight(seats=2)
    booking_id = new_booking(ensure_user("late-issue@example.com"), flight_id, 2)

    late = _held_copy(booking_id)
    first = SessionLocal()
    try:
        booking_service.update_booking(first, booking_id, BookingUpdate(status=BookingStatus.cancelled))
        items = [TicketItem.model_validate(ticket_item("1A")), TicketItem.model_validate(ticket_item("1B"))]
        with pytest.raises(DomainError) as exc:
            ticket_service.create_multiple_tickets(late, booking_id, flight_id, items)
        assert exc.value.message == "Booking is cancelled"
        assert seat_ledger.count_active_tickets(first, flight_id=flight_id) == 0
    finally:
        first.close()
        late.close()
    assert flight_seats(flight_id) == 2


def test_racing_cancels_credit_once():
    flight_id = seed_flight(seats=6)
    booking_id = new_booking(ensure_user("race-cancel@example.com"), flight_id, 2)

    cancel = BookingUpdate(status=BookingStatus.cancelled)
    results = run_concurrently(
        lambda db: booking_service.update_booking(db, booking_id, cancel),
        lambda db: booking_service.update_booking(db, booking_id, cancel),
    )
    errors = [r for r in results if isinstance(r, DomainError)]
    assert len(errors) == 1
    assert errors[0].code == ErrorCode.BOOKING_TERMINAL
    assert flight_seats(flight_id) == 6
