import logging
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flightbook.core.exceptions import DomainError, ErrorCode, NotFoundError
from flightbook.models.booking import Booking
from flightbook.models.flight import FareOption, Flight
from flightbook.schemas.flight import FlightCreate, FlightUpdate
from flightbook.services import aircraft as aircraft_service
from flightbook.services import seat_ledger
from flightbook.services.pagination import paginate

logger = logging.getLogger(__name__)


def get_flight_or_404(db: Session, flight_id: int) -> Flight:
    f = db.get(Flight, flight_id)
    if not f:
        raise NotFoundError("Flight not found", ErrorCode.FLIGHT_NOT_FOUND)
    return f


def create_flight(db: Session, payload: FlightCreate) -> Flight:
    aircraft = None
    if payload.aircraft_id is not None:
        aircraft = aircraft_service.get_aircraft_or_404(db, payload.aircraft_id)

    capacity = sum(fo.capacity for fo in payload.fare_options)
    if payload.seats_total is not None:
        seats_total = payload.seats_total
    elif aircraft is not None and not payload.fare_options:
        seats_total = aircraft.capacity
    else:
        seats_total = capacity
    if payload.fare_options and capacity > seats_total:
        raise DomainError("Fare option capacities exceed seats_total", ErrorCode.INVALID_FLIGHT)
    seats_available = payload.seats_available if payload.seats_available is not None else seats_total
    if seats_available > seats_total:
        raise DomainError("seats_available cannot exceed seats_total", ErrorCode.INVALID_FLIGHT)
    if aircraft is not None:
        aircraft_service.ensure_flight_fits(
            aircraft, seats_total, {fo.seat_class.value: fo.capacity for fo in payload.fare_options}
        )

    f = Flight(
        flight_number=payload.flight_number,
        airline=payload.airline,
        aircraft=payload.aircraft or (aircraft.model if aircraft else None),
        aircraft_id=payload.aircraft_id,
        origin=payload.origin,
        destination=payload.destination,
        departure=payload.departure,
        arrival=payload.arrival,
        price=payload.price,
        seats_total=seats_total,
        seats_available=seats_available,
        stops=payload.stops,
        is_active=True,
    )
    for fo in payload.fare_options:
        available = fo.seats_available if fo.seats_available is not None else fo.capacity
        if available > fo.capacity:
            raise DomainError(f"{fo.seat_class.value}: seats_available cannot exceed capacity", ErrorCode.INVALID_FLIGHT)
        f.fare_options.append(
            FareOption(seat_class=fo.seat_class.value, price=fo.price, capacity=fo.capacity, seats_available=available, perks=fo.perks)
        )
    db.add(f)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DomainError("Flight number already exists", ErrorCode.INVALID_FLIGHT)
    db.refresh(f)
    logger.info("flight %s (%s) created with %s seats", f.id, f.flight_number, f.seats_total)
    return f


def _apply_flight_update(f: Flight, data: dict) -> None:
    booked = f.seats_total - f.seats_available
    new_total = data.pop("seats_total", None)
    if new_total is not None:
        if new_total < booked:
            raise DomainError("seats_total cannot be less than already booked seats", ErrorCode.INVALID_FLIGHT)
        # keep the booked count, resize the free pool
        f.seats_total = new_total
        f.seats_available = new_total - booked
    new_sa = data.pop("seats_available", None)
    if new_sa is not None:
        if new_sa > f.seats_total:
            raise DomainError("seats_available cannot exceed seats_total", ErrorCode.INVALID_FLIGHT)
        f.seats_available = new_sa
    for key, value in data.items():
        if value is None and key not in ("aircraft", "aircraft_id"):
            continue
        setattr(f, key, value)
    if f.arrival <= f.departure:
        raise DomainError("arrival must be after departure", ErrorCode.INVALID_FLIGHT)


def update_flight(db: Session, flight_id: int, payload: FlightUpdate) -> Flight:
    f = get_flight_or_404(db, flight_id)
    data = payload.model_dump(exclude_unset=True)

    with seat_ledger.flight_locks.hold(f.id):
        db.refresh(f)
        try:
            _apply_flight_update(f, data)
            if f.aircraft_id is not None:
                aircraft = aircraft_service.get_aircraft_or_404(db, f.aircraft_id)
                aircraft_service.ensure_flight_fits(aircraft, f.seats_total, aircraft_service.fare_capacities(f))
            db.commit()
        except (DomainError, NotFoundError):
            db.rollback()
            raise
        except IntegrityError:
            db.rollback()
            raise DomainError("Flight number already exists", ErrorCode.INVALID_FLIGHT)
    db.refresh(f)
    logger.info("flight %s updated: %s", f.id, sorted(payload.model_dump(exclude_unset=True)))
    return f


def delete_flight(db: Session, flight_id: int) -> None:
    f = get_flight_or_404(db, flight_id)
    if db.query(Booking.id).filter(Booking.flight_id == f.id).first():
        raise DomainError("Flight has bookings and cannot be deleted", ErrorCode.FLIGHT_HAS_BOOKINGS)
    db.delete(f)
    db.commit()
    seat_ledger.flight_locks.discard(flight_id)
    logger.info("flight %s deleted", flight_id)


def search_flights(
    db: Session,
    page: int,
    limit: int,
    origin: str | None = None,
    destination: str | None = None,
    airlines: list[str] | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    day: datetime | None = None,
    passengers: int | None = None,
    seat_class: str | None = None,
    max_stops: int | None = None,
    only_active: bool = True,
    sort_by: str = "departure",
    sort_dir: str = "asc",
) -> tuple[list[Flight], dict]:
    q = db.query(Flight)
    if only_active:
        q = q.filter(Flight.is_active.is_(True))
    if origin:
        q = q.filter(Flight.origin == origin)
    if destination:
        q = q.filter(Flight.destination == destination)
    if airlines:
        q = q.filter(Flight.airline.in_(airlines))
    if day is not None:
        start_dt = datetime.combine(day.date(), datetime.min.time())
        end_dt = start_dt.replace(hour=23, minute=59, second=59, microsecond=999999)
        q = q.filter(Flight.departure >= start_dt, Flight.departure <= end_dt)
    if max_stops is not None:
        q = q.filter(Flight.stops <= max_stops)
    if passengers is not None:
        q = q.filter(Flight.seats_available >= passengers)

    if seat_class:
        # price and seat filters apply to the selected class
        fare_filter = [FareOption.seat_class == seat_class]
        if passengers is not None:
            fare_filter.append(FareOption.seats_available >= passengers)
        if min_price is not None:
            fare_filter.append(FareOption.price >= min_price)
        if max_price is not None:
            fare_filter.append(FareOption.price <= max_price)
        q = q.filter(Flight.fare_options.any(and_(*fare_filter)))
    else:
        if min_price is not None:
            q = q.filter(or_(Flight.price >= min_price, Flight.fare_options.any(FareOption.price >= min_price)))
        if max_price is not None:
            q = q.filter(or_(Flight.price <= max_price, Flight.fare_options.any(FareOption.price <= max_price)))

    if sort_by == "price":
        order_col = Flight.price
    elif sort_by == "stops":
        order_col = Flight.stops
    else:
        order_col = Flight.departure
    if sort_dir == "desc":
        order_col = order_col.desc()
    return paginate(q.order_by(order_col, Flight.id), page, limit)
