import logging
import random
import string

from sqlalchemy.orm import Session

from flightbook.core.clock import utcnow
from flightbook.core.exceptions import DomainError, ErrorCode, NotFoundError
from flightbook.models.booking import Booking
from flightbook.models.enums import BookingStatus, PaymentStatus
from flightbook.models.payment import Payment
from flightbook.services.pagination import paginate

logger = logging.getLogger(__name__)


def _gen_transaction_id() -> str:
    return "T" + "".join(random.choices(string.ascii_uppercase + string.digits, k=11))


def get_payment_or_404(db: Session, payment_id: int) -> Payment:
    p = db.get(Payment, payment_id)
    if not p:
        raise NotFoundError("Payment not found", ErrorCode.PAYMENT_NOT_FOUND)
    return p


def create_payment(db: Session, booking_id: int, method: str) -> Payment:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", ErrorCode.BOOKING_NOT_FOUND)
    if booking.status == BookingStatus.cancelled.value:
        raise DomainError("Booking is cancelled", ErrorCode.BOOKING_TERMINAL)
    if booking.payment_status == PaymentStatus.success.value:
        raise DomainError("Booking is already paid", ErrorCode.BOOKING_PAID)
    p = Payment(
        booking_id=booking.id,
        user_id=booking.user_id,
        amount=booking.total_price,
        method=method,
        status=PaymentStatus.pending.value,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("payment %s opened for booking %s (%s)", p.id, booking.id, method)
    return p


def update_payment_status(db: Session, payment_id: int, status: PaymentStatus, transaction_id: str | None = None) -> Payment:
    """Settle a pending payment and mirror the outcome onto its booking."""
    p = get_payment_or_404(db, payment_id)
    if p.status != PaymentStatus.pending.value:
        raise DomainError("Payment is already settled", ErrorCode.PAYMENT_TERMINAL)
    if status == PaymentStatus.pending:
        return p
    booking = db.get(Booking, p.booking_id)
    if booking and booking.status == BookingStatus.cancelled.value and status == PaymentStatus.success:
        raise DomainError("Booking is cancelled", ErrorCode.BOOKING_TERMINAL)
    p.status = status.value
    p.transaction_id = transaction_id or _gen_transaction_id()
    p.payment_date = utcnow()
    if booking and booking.payment_status != PaymentStatus.success.value:
        booking.payment_status = status.value
    db.commit()
    db.refresh(p)
    logger.info("payment %s settled as %s", p.id, p.status)
    return p


def list_payments(db: Session, page: int, limit: int, order: str = "asc", booking_id: int | None = None, user_id: int | None = None):
    q = db.query(Payment)
    if booking_id is not None:
        q = q.filter(Payment.booking_id == booking_id)
    if user_id is not None:
        q = q.filter(Payment.user_id == user_id)
    q = q.order_by(Payment.amount.desc() if order == "desc" else Payment.amount.asc(), Payment.id.asc())
    return paginate(q, page, limit)
