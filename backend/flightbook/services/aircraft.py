"""Aircraft seat layouts and the flight capacity rules derived from them."""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flightbook.core.exceptions import DomainError, ErrorCode, NotFoundError
from flightbook.models.aircraft import Aircraft
from flightbook.models.flight import Flight
from flightbook.schemas.aircraft import AircraftCreate, AircraftUpdate, SeatLayout
from flightbook.services.pagination import paginate

logger = logging.getLogger(__name__)


def get_aircraft_or_404(db: Session, aircraft_id: int) -> Aircraft:
    aircraft = db.get(Aircraft, aircraft_id)
    if not aircraft:
        raise NotFoundError("Aircraft not found", ErrorCode.AIRCRAFT_NOT_FOUND)
    return aircraft


def _layout(config: dict) -> dict:
    return {seat_class.value: SeatLayout.model_validate(layout).model_dump() for seat_class, layout in config.items()}


def fare_capacities(flight: Flight) -> dict[str, int]:
    return {fo.seat_class: fo.capacity for fo in flight.fare_options}


def ensure_flight_fits(aircraft: Aircraft, seats_total: int, capacities: dict[str, int]) -> None:
    """A flight may only sell the classes its aircraft has, and no more seats than it carries."""
    for seat_class, capacity in capacities.items():
        class_seats = aircraft.class_capacity(seat_class)
        if not class_seats:
            raise DomainError(
                f"Seat class {seat_class} is not configured on aircraft {aircraft.aircraft_code}",
                ErrorCode.INVALID_AIRCRAFT,
            )
        if capacity > class_seats:
            raise DomainError(
                f"{seat_class} capacity exceeds the aircraft's {class_seats} seats", ErrorCode.INVALID_AIRCRAFT
            )
    if seats_total > aircraft.capacity:
        raise DomainError(f"Total seats exceed aircraft capacity ({aircraft.capacity})", ErrorCode.INVALID_AIRCRAFT)


def create_aircraft(db: Session, payload: AircraftCreate) -> Aircraft:
    aircraft = Aircraft(
        aircraft_code=payload.aircraft_code,
        model=payload.model,
        manufacturer=payload.manufacturer,
        seat_configuration=_layout(payload.seat_configuration),
        status=payload.status.value,
    )
    db.add(aircraft)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DomainError("Aircraft already registered", ErrorCode.AIRCRAFT_CODE_TAKEN)
    db.refresh(aircraft)
    logger.info("aircraft %s (%s) registered with %s seats", aircraft.id, aircraft.aircraft_code, aircraft.capacity)
    return aircraft


def update_aircraft(db: Session, aircraft_id: int, payload: AircraftUpdate) -> Aircraft:
    """Edit an aircraft; a new seat layout must still hold every flight flown with it."""
    aircraft = get_aircraft_or_404(db, aircraft_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "seat_configuration" in data:
        aircraft.seat_configuration = _layout(payload.seat_configuration)
    if "status" in data:
        aircraft.status = payload.status.value
    for key in ("model", "manufacturer"):
        if key in data:
            setattr(aircraft, key, data[key])

    try:
        for flight in db.query(Flight).filter(Flight.aircraft_id == aircraft.id):
            ensure_flight_fits(aircraft, flight.seats_total, fare_capacities(flight))
        db.commit()
    except DomainError:
        db.rollback()
        raise
    db.refresh(aircraft)
    logger.info("aircraft %s updated: %s", aircraft.id, sorted(data))
    return aircraft


def delete_aircraft(db: Session, aircraft_id: int) -> None:
    aircraft = get_aircraft_or_404(db, aircraft_id)
    if db.query(Flight.id).filter(Flight.aircraft_id == aircraft.id).first():
        raise DomainError("Aircraft is assigned to flights and cannot be deleted", ErrorCode.AIRCRAFT_IN_USE)
    db.delete(aircraft)
    db.commit()
    logger.info("aircraft %s deleted", aircraft_id)


def list_aircraft(
    db: Session,
    page: int,
    limit: int,
    status: str | None = None,
    manufacturer: str | None = None,
    model: str | None = None,
    order: str = "asc",
) -> tuple[list[Aircraft], dict]:
    q = db.query(Aircraft)
    if status:
        q = q.filter(Aircraft.status == status)
    if manufacturer:
        q = q.filter(Aircraft.manufacturer == manufacturer)
    if model:
        q = q.filter(Aircraft.model == model)
    return paginate(q.order_by(Aircraft.id.desc() if order == "desc" else Aircraft.id), page, limit)
