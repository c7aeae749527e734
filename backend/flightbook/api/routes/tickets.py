from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr
from sqlalchemy.orm import Session

from flightbook.api.deps import PageParams, ensure_owner_or_admin, get_current_user, is_admin, require_roles
from flightbook.api.serializers import ticket_out
from flightbook.core.exceptions import ForbiddenError
from flightbook.db.session import get_db
from flightbook.models.enums import TicketStatus
from flightbook.models.user import User
from flightbook.schemas.ticket import CancellationCheck, TicketBatchCreate, TicketCreate, TicketOut, TicketUpdate
from flightbook.services import bookings as booking_service
from flightbook.services import tickets as ticket_service

router = APIRouter()


def _check_booking_access(db: Session, user: User, booking_id: int) -> None:
    booking = booking_service.get_booking_or_404(db, booking_id)
    ensure_owner_or_admin(user, booking.user_id)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=TicketOut)
def create_ticket(payload: TicketCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _check_booking_access(db, user, payload.booking_id)
    ticket = ticket_service.create_ticket(
        db, payload.booking_id, payload.flight_id, payload, payload.seat_class.value if payload.seat_class else None
    )
    return ticket_out(ticket)


@router.post("/batch", status_code=status.HTTP_201_CREATED)
def create_multiple_tickets(payload: TicketBatchCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Issue one ticket per passenger for a booking; either every ticket is issued or none."""
    _check_booking_access(db, user, payload.booking_id)
    tickets = ticket_service.create_multiple_tickets(
        db, payload.booking_id, payload.flight_id, payload.tickets, payload.seat_class.value if payload.seat_class else None
    )
    return {"inserted_count": len(tickets), "tickets": [ticket_out(t) for t in tickets]}


@router.get("/search", dependencies=[Depends(require_roles("admin"))])
def search_tickets(
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    booking_id: int | None = None,
    flight_id: int | None = None,
    passenger_email: str | None = None,
    passenger_passport: str | None = None,
    status_filter: TicketStatus | None = Query(None, alias="status"),
    seat_number: str | None = None,
    sort_by: str = Query("seat_number", pattern="^(seat_number|price|status|created_at)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    items, pagination = ticket_service.search_tickets(
        db,
        paging.page,
        paging.limit,
        booking_id=booking_id,
        flight_id=flight_id,
        passenger_email=passenger_email,
        passenger_passport=passenger_passport,
        status=status_filter,
        seat_number=seat_number,
        sort_by=sort_by,
        order=order,
    )
    return {"items": [ticket_out(t) for t in items], "pagination": pagination}


@router.get("/booking/{booking_id}")
def booking_tickets(
    booking_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    paging: PageParams = Depends(),
    sort_by: str = Query("seat_number", pattern="^(seat_number|price|status|created_at)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    _check_booking_access(db, user, booking_id)
    items, pagination = ticket_service.search_tickets(
        db, paging.page, paging.limit, booking_id=booking_id, sort_by=sort_by, order=order
    )
    return {"items": [ticket_out(t) for t in items], "pagination": pagination}


@router.get("/passenger")
def passenger_tickets(
    email: EmailStr,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    paging: PageParams = Depends(),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    """Tickets issued to a passenger e-mail; customers may only look up their own address."""
    if not is_admin(user) and email.lower() != user.email.lower():
        raise ForbiddenError()
    items, pagination = ticket_service.search_tickets(db, paging.page, paging.limit, passenger_email=email, order=order)
    return {"items": [ticket_out(t) for t in items], "pagination": pagination}


@router.get("/{ticket_id}", response_model=TicketOut)
def get_ticket(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ticket = ticket_service.get_ticket_or_404(db, ticket_id)
    ensure_owner_or_admin(user, ticket.user_id)
    return ticket_out(ticket)


@router.get("/{ticket_id}/can-cancel", response_model=CancellationCheck)
def can_cancel(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ticket = ticket_service.get_ticket_or_404(db, ticket_id)
    ensure_owner_or_admin(user, ticket.user_id)
    return ticket_service.can_cancel_ticket(db, ticket_id)


@router.post("/{ticket_id}/cancel", response_model=TicketOut)
def cancel_ticket(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Cancel a ticket (owner or admin); refused inside the cutoff window before departure."""
    ticket = ticket_service.get_ticket_or_404(db, ticket_id)
    ensure_owner_or_admin(user, ticket.user_id)
    return ticket_out(ticket_service.cancel_ticket(db, ticket_id))


@router.patch("/{ticket_id}", response_model=TicketOut, dependencies=[Depends(require_roles("admin"))])
def update_ticket(ticket_id: int, payload: TicketUpdate, db: Session = Depends(get_db)):
    return ticket_out(ticket_service.update_ticket(db, ticket_id, payload))


@router.delete("/{ticket_id}", dependencies=[Depends(require_roles("admin"))])
def delete_ticket(ticket_id: int, db: Session = Depends(get_db)):
    ticket_service.delete_ticket(db, ticket_id)
    return {"status": "deleted"}
