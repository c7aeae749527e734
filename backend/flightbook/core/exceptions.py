from enum import Enum


class ErrorCode(str, Enum):
    """Stable, machine-readable identifiers for every failure the API reports."""

    USER_NOT_FOUND = "user_not_found"
    FLIGHT_NOT_FOUND = "flight_not_found"
    BOOKING_NOT_FOUND = "booking_not_found"
    TICKET_NOT_FOUND = "ticket_not_found"
    PAYMENT_NOT_FOUND = "payment_not_found"
    AIRCRAFT_NOT_FOUND = "aircraft_not_found"
    FARE_CLASS_NOT_FOUND = "fare_class_not_found"
    INSUFFICIENT_SEATS = "insufficient_seats"
    SEAT_COUNT_CONFLICT = "seat_count_conflict"
    SEAT_ALREADY_BOOKED = "seat_already_booked"
    DUPLICATE_SEAT_IN_REQUEST = "duplicate_seat_in_request"
    SEAT_CLASS_MISMATCH = "seat_class_mismatch"
    INVALID_PRICE = "invalid_price"
    BOOKING_TERMINAL = "booking_terminal"
    BOOKING_NOT_PAID = "booking_not_paid"
    BOOKING_PAID = "booking_paid"
    BOOKING_HAS_TICKETS = "booking_has_tickets"
    BOOKING_FLIGHT_MISMATCH = "booking_flight_mismatch"
    CANCELLATION_WINDOW_CLOSED = "cancellation_window_closed"
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    FLIGHT_HAS_BOOKINGS = "flight_has_bookings"
    INVALID_FLIGHT = "invalid_flight"
    INVALID_AIRCRAFT = "invalid_aircraft"
    AIRCRAFT_IN_USE = "aircraft_in_use"
    AIRCRAFT_CODE_TAKEN = "aircraft_code_taken"
    PAYMENT_TERMINAL = "payment_terminal"
    EMAIL_TAKEN = "email_taken"
    INVALID_CREDENTIALS = "invalid_credentials"
    USER_BLOCKED = "user_blocked"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation_error"


class AppError(Exception):
    """Base class for errors raised by the service layer.

    Carries a human readable message, an HTTP-like severity and a stable code.
    Translation to a transport response happens in ``flightbook.api.errors``.
    """

    def __init__(self, message: str, status_code: int, code: ErrorCode) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class DomainError(AppError):
    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION) -> None:
        super().__init__(message, 400, code)


class NotFoundError(AppError):
    def __init__(self, message: str, code: ErrorCode) -> None:
        super().__init__(message, 404, code)


class AuthenticationError(AppError):
    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_CREDENTIALS) -> None:
        super().__init__(message, 401, code)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden", code: ErrorCode = ErrorCode.FORBIDDEN) -> None:
        super().__init__(message, 403, code)
