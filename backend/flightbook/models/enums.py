from enum import Enum


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class SeatClass(str, Enum):
    economy = "economy"
    business = "business"
    first_class = "firstClass"


class AircraftStatus(str, Enum):
    active = "active"
    maintenance = "maintenance"
    retired = "retired"


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    success = "success"
    failed = "failed"


class PaymentMethod(str, Enum):
    card = "card"
    momo = "momo"
    zalopay = "zalopay"


class TicketStatus(str, Enum):
    unused = "unused"
    used = "used"
    cancelled = "cancelled"


# Allowed ticket status changes; anything not listed is rejected.
TICKET_TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.unused: frozenset({TicketStatus.used, TicketStatus.cancelled}),
    TicketStatus.used: frozenset(),
    TicketStatus.cancelled: frozenset(),
}
