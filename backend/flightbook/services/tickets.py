"""Ticket issuance, seat reassignment and cancellation."""
from datetime import datetime
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flightbook.core.clock import utcnow
from flightbook.core.config import settings
from flightbook.core.exceptions import DomainError, ErrorCode, NotFoundError
from flightbook.models.booking import Booking
from flightbook.models.enums import BookingStatus, TICKET_TRANSITIONS, TicketStatus
from flightbook.models.flight import Flight
from flightbook.models.ticket import Ticket
from flightbook.schemas.ticket import Passenger, TicketItem, TicketUpdate
from flightbook.services import seat_ledger
from flightbook.services.pagination import paginate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "seat_number": Ticket.seat_number,
    "price": Ticket.price,
    "status": Ticket.status,
    "created_at": Ticket.created_at,
}

_INVALID_PRICE = "Invalid ticket price: Price must be greater than 0"


def get_ticket_or_404(db: Session, ticket_id: int) -> Ticket:
    ticket = db.get(Ticket, ticket_id)
    if not ticket:
        raise NotFoundError("Ticket not found", ErrorCode.TICKET_NOT_FOUND)
    return ticket


def _get_flight(db: Session, flight_id: int) -> Flight:
    flight = db.get(Flight, flight_id)
    if not flight:
        raise NotFoundError("Flight not found", ErrorCode.FLIGHT_NOT_FOUND)
    return flight


def _booking_and_flight(db: Session, booking_id: int, flight_id: int) -> tuple[Booking, Flight]:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", ErrorCode.BOOKING_NOT_FOUND)
    flight = _get_flight(db, flight_id)
    if booking.flight_id != flight.id:
        raise DomainError("Booking does not belong to this flight", ErrorCode.BOOKING_FLIGHT_MISMATCH)
    if booking.status == BookingStatus.cancelled.value:
        raise DomainError("Booking is cancelled", ErrorCode.BOOKING_TERMINAL)
    return booking, flight


def _apply_passenger(ticket: Ticket, p: Passenger) -> None:
    ticket.passenger_name = p.name
    ticket.passenger_email = p.email.lower()
    ticket.passenger_phone = p.phone
    ticket.passenger_date_of_birth = p.date_of_birth
    ticket.passenger_gender = p.gender
    ticket.passenger_nationality = p.nationality
    ticket.passenger_passport_number = p.passport_number
    ticket.passenger_id_number = p.id_number


def _commit_seats(db: Session) -> None:
    """Commit, translating a unique-index hit into the same error as the pre-check."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DomainError("Seat is already booked", ErrorCode.SEAT_ALREADY_BOOKED)


def create_multiple_tickets(
    db: Session, booking_id: int, flight_id: int, items: list[TicketItem], seat_class: str | None = None
) -> list[Ticket]:
    """Issue a batch of tickets against a booking, all or nothing.

    Every check runs before the first insert, and the checks plus the insert
    run under the flight's lock so two batches cannot both claim the last seat.
    """
    booking, flight = _booking_and_flight(db, booking_id, flight_id)
    if seat_class is not None and seat_class != booking.seat_class:
        raise DomainError("Seat class does not match the booking", ErrorCode.SEAT_CLASS_MISMATCH)

    seat_numbers = [t.seat_number for t in items]
    if len(set(seat_numbers)) != len(seat_numbers):
        raise DomainError("Duplicate seat numbers in request", ErrorCode.DUPLICATE_SEAT_IN_REQUEST)

    with seat_ledger.flight_locks.hold(flight.id):
        booking = seat_ledger.lock_booking(db, booking.id)
        if booking is None:
            raise NotFoundError("Booking not found", ErrorCode.BOOKING_NOT_FOUND)
        # its seats may have gone back to the pool while we waited
        if booking.status == BookingStatus.cancelled.value:
            raise DomainError("Booking is cancelled", ErrorCode.BOOKING_TERMINAL)
        seat_ledger.ensure_seats_free(db, flight.id, seat_numbers)
        seat_ledger.ensure_allocation(db, booking, len(items))
        if any(t.price <= 0 for t in items):
            raise DomainError(_INVALID_PRICE, ErrorCode.INVALID_PRICE)

        tickets = []
        for item in items:
            ticket = Ticket(
                booking_id=booking.id,
                flight_id=flight.id,
                user_id=booking.user_id,
                seat_class=booking.seat_class,
                seat_number=item.seat_number,
                price=item.price,
                status=item.status.value,
            )
            _apply_passenger(ticket, item.passenger)
            tickets.append(ticket)
        db.add_all(tickets)
        _commit_seats(db)
    for t in tickets:
        db.refresh(t)
    logger.info("issued %s ticket(s) for booking %s on flight %s: %s", len(tickets), booking.id, flight.id, seat_numbers)
    return tickets


def create_ticket(db: Session, booking_id: int, flight_id: int, item: TicketItem, seat_class: str | None = None) -> Ticket:
    return create_multiple_tickets(db, booking_id, flight_id, [item], seat_class)[0]


def can_cancel_ticket(db: Session, ticket_id: int, now: datetime | None = None) -> dict:
    """Whether the ticket is still outside the cancellation cutoff.

    Always derived from the flight's current departure time.
    """
    ticket = get_ticket_or_404(db, ticket_id)
    flight = _get_flight(db, ticket.flight_id)
    now = now or utcnow()
    hours = (flight.departure - now).total_seconds() / 3600
    return {"can_cancel": hours > settings.cancellation_cutoff_hours, "hours_until_departure": hours}


def update_ticket(db: Session, ticket_id: int, patch: TicketUpdate) -> Ticket:
    ticket = get_ticket_or_404(db, ticket_id)

    with seat_ledger.flight_locks.hold(ticket.flight_id):
        if patch.seat_number is not None and patch.seat_number != ticket.seat_number:
            seat_ledger.ensure_seats_free(db, ticket.flight_id, [patch.seat_number], exclude_ticket_id=ticket.id)

        if patch.status is not None and patch.status.value != ticket.status:
            current = TicketStatus(ticket.status)
            if patch.status not in TICKET_TRANSITIONS[current]:
                raise DomainError(
                    f"Cannot change ticket status from {current.value} to {patch.status.value}",
                    ErrorCode.INVALID_STATUS_TRANSITION,
                )
            if patch.status == TicketStatus.cancelled:
                check = can_cancel_ticket(db, ticket.id)
                if not check["can_cancel"]:
                    raise DomainError(
                        f"Cannot cancel ticket: only allowed before {settings.cancellation_cutoff_hours}h "
                        f"from departure ({check['hours_until_departure']:.2f}h left)",
                        ErrorCode.CANCELLATION_WINDOW_CLOSED,
                    )

        if patch.price is not None and patch.price <= 0:
            raise DomainError(_INVALID_PRICE, ErrorCode.INVALID_PRICE)

        if patch.seat_number is not None:
            ticket.seat_number = patch.seat_number
        if patch.status is not None:
            ticket.status = patch.status.value
        if patch.price is not None:
            ticket.price = patch.price
        if patch.passenger is not None:
            _apply_passenger(ticket, patch.passenger)
        ticket.updated_at = utcnow()
        _commit_seats(db)
    db.refresh(ticket)
    logger.info("ticket %s updated: seat=%s status=%s", ticket.id, ticket.seat_number, ticket.status)
    return ticket


def cancel_ticket(db: Session, ticket_id: int) -> Ticket:
    return update_ticket(db, ticket_id, TicketUpdate(status=TicketStatus.cancelled))


def delete_ticket(db: Session, ticket_id: int) -> None:
    ticket = get_ticket_or_404(db, ticket_id)
    flight_id, seat_number = ticket.flight_id, ticket.seat_number
    db.delete(ticket)
    db.commit()
    logger.info("ticket %s deleted (flight %s seat %s)", ticket_id, flight_id, seat_number)


def get_available_seats(db: Session, flight_id: int) -> dict:
    return seat_ledger.seat_summary(db, _get_flight(db, flight_id))


def get_booked_seats(db: Session, flight_id: int) -> list[Ticket]:
    _get_flight(db, flight_id)
    return (
        db.query(Ticket)
        .filter(Ticket.flight_id == flight_id, Ticket.status != TicketStatus.cancelled.value)
        .order_by(Ticket.seat_number.asc())
        .all()
    )


def ticket_stats(db: Session, flight_id: int) -> dict[str, int]:
    rows = (
        db.query(Ticket.status, func.count(Ticket.id))
        .filter(Ticket.flight_id == flight_id)
        .group_by(Ticket.status)
        .all()
    )
    return {status: count for status, count in rows}


def _ordered(q, sort_by: str, order: str):
    col = SORTABLE_FIELDS.get(sort_by, Ticket.seat_number)
    return q.order_by(col.desc() if order == "desc" else col.asc(), Ticket.id.asc())


def search_tickets(
    db: Session,
    page: int,
    limit: int,
    booking_id: int | None = None,
    flight_id: int | None = None,
    passenger_email: str | None = None,
    passenger_passport: str | None = None,
    status: TicketStatus | None = None,
    seat_number: str | None = None,
    sort_by: str = "seat_number",
    order: str = "asc",
) -> tuple[list[Ticket], dict]:
    q = db.query(Ticket)
    if booking_id is not None:
        q = q.filter(Ticket.booking_id == booking_id)
    if flight_id is not None:
        q = q.filter(Ticket.flight_id == flight_id)
    if passenger_email:
        q = q.filter(Ticket.passenger_email == passenger_email.lower())
    if passenger_passport:
        q = q.filter(Ticket.passenger_passport_number == passenger_passport)
    if status is not None:
        q = q.filter(Ticket.status == status.value)
    if seat_number:
        q = q.filter(Ticket.seat_number == seat_number)
    return paginate(_ordered(q, sort_by, order), page, limit)
