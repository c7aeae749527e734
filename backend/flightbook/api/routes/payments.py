from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flightbook.api.deps import PageParams, ensure_owner_or_admin, get_current_user, require_roles
from flightbook.api.serializers import payment_out
from flightbook.db.session import get_db
from flightbook.models.user import User
from flightbook.schemas.payment import PaymentCreate, PaymentOut, PaymentStatusUpdate
from flightbook.services import bookings as booking_service
from flightbook.services import payments as payment_service

router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=PaymentOut)
def create_payment(payload: PaymentCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    booking = booking_service.get_booking_or_404(db, payload.booking_id)
    ensure_owner_or_admin(user, booking.user_id)
    return payment_out(payment_service.create_payment(db, payload.booking_id, payload.method.value))


@router.get("/", dependencies=[Depends(require_roles("admin"))])
def list_payments(
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    booking_id: int | None = None,
    user_id: int | None = None,
):
    items, pagination = payment_service.list_payments(db, paging.page, paging.limit, order, booking_id, user_id)
    return {"items": [payment_out(p) for p in items], "pagination": pagination}


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    p = payment_service.get_payment_or_404(db, payment_id)
    ensure_owner_or_admin(user, p.user_id)
    return payment_out(p)


@router.patch("/{payment_id}/status", response_model=PaymentOut, dependencies=[Depends(require_roles("admin"))])
def update_payment_status(payment_id: int, payload: PaymentStatusUpdate, db: Session = Depends(get_db)):
    return payment_out(payment_service.update_payment_status(db, payment_id, payload.status, payload.transaction_id))
