from flightbook.models.base import Base
from flightbook.models.user import User
from flightbook.models.aircraft import Aircraft
from flightbook.models.flight import Flight, FareOption
from flightbook.models.booking import Booking
from flightbook.models.ticket import Ticket
from flightbook.models.payment import Payment

__all__ = ["Base", "User", "Aircraft", "Flight", "FareOption", "Booking", "Ticket", "Payment"]
