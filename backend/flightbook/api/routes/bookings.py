from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flightbook.api.deps import PageParams, ensure_owner_or_admin, get_current_user, is_admin, require_roles
from flightbook.api.serializers import booking_out, flight_out, user_out
from flightbook.db.session import get_db
from flightbook.models.enums import BookingStatus, PaymentStatus
from flightbook.models.user import User
from flightbook.schemas.booking import BookingCreate, BookingOut, BookingSearch, BookingUpdate
from flightbook.services import bookings as booking_service

router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=BookingOut)
def create_booking(payload: BookingCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Reserve ``quantity`` seats on a flight.

    Customers always book for themselves; admins may pass ``user_id``.
    """
    owner_id = payload.user_id if (payload.user_id is not None and is_admin(user)) else user.id
    booking = booking_service.create_booking(
        db, owner_id, payload.flight_id, payload.quantity, payload.seat_class.value if payload.seat_class else None
    )
    return booking_out(booking)


@router.get("/", dependencies=[Depends(require_roles("admin"))])
def list_bookings(
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    items, pagination = booking_service.list_bookings(db, paging.page, paging.limit, order)
    return {"items": [booking_out(b) for b in items], "pagination": pagination}


@router.get("/search", dependencies=[Depends(require_roles("admin"))])
def search_bookings(
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    user_id: int | None = None,
    flight_id: int | None = None,
    status_filter: BookingStatus | None = Query(None, alias="status"),
    payment_status: PaymentStatus | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    sort_by: str = Query("booking_time", pattern="^(booking_time|total_price|quantity|status)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
):
    filters = BookingSearch(
        user_id=user_id,
        flight_id=flight_id,
        status=status_filter,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date,
        min_price=min_price,
        max_price=max_price,
    )
    items, pagination = booking_service.search_bookings(db, filters, paging.page, paging.limit, sort_by, sort_order)
    return {"items": [booking_out(b) for b in items], "pagination": pagination}


@router.get("/stats", dependencies=[Depends(require_roles("admin"))])
def booking_stats(db: Session = Depends(get_db)):
    return booking_service.booking_stats(db)


@router.get("/my")
def my_bookings(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    paging: PageParams = Depends(),
    order: str = Query("desc", pattern="^(asc|desc)$"),
):
    items, pagination = booking_service.list_user_bookings(db, user.id, paging.page, paging.limit, order)
    return {"items": [booking_out(b) for b in items], "pagination": pagination}


@router.get("/{booking_id}")
def get_booking(booking_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    booking, owner, flight = booking_service.get_booking_detail(db, booking_id)
    ensure_owner_or_admin(user, booking.user_id)
    return {
        "booking": booking_out(booking),
        "user": user_out(owner) if owner else None,
        "flight": flight_out(flight) if flight else None,
    }


@router.patch("/{booking_id}", response_model=BookingOut, dependencies=[Depends(require_roles("admin"))])
def update_booking(booking_id: int, payload: BookingUpdate, db: Session = Depends(get_db)):
    return booking_out(booking_service.update_booking(db, booking_id, payload))


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(booking_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    booking = booking_service.get_booking_or_404(db, booking_id)
    ensure_owner_or_admin(user, booking.user_id)
    return booking_out(booking_service.update_booking(db, booking_id, BookingUpdate(status=BookingStatus.cancelled)))


@router.delete("/{booking_id}")
def delete_booking(booking_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    booking = booking_service.get_booking_or_404(db, booking_id)
    ensure_owner_or_admin(user, booking.user_id)
    booking_service.delete_booking(db, booking_id)
    return {"status": "deleted"}
