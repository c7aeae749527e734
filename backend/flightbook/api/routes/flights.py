from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flightbook.api.deps import PageParams, require_roles
from flightbook.api.serializers import flight_out, passenger_out, ticket_out
from flightbook.core.exceptions import DomainError
from flightbook.db.session import get_db
from flightbook.models.enums import SeatClass, TicketStatus
from flightbook.schemas.flight import FlightCreate, FlightOut, FlightUpdate
from flightbook.services import flights as flight_service
from flightbook.services import tickets as ticket_service

router = APIRouter()


@router.get("/")
def list_flights(
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    origin: str | None = None,
    destination: str | None = None,
    airlines: str | None = Query(None, description="Comma separated airlines filter"),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    date: str | None = Query(None, description="Flight departure date YYYY-MM-DD"),
    passengers: int | None = Query(None, ge=1, description="Required seats available"),
    seat_class: SeatClass | None = None,
    max_stops: int | None = Query(None, ge=0, description="Max number of stops (layovers)"),
    sort_by: str = Query("departure", pattern="^(price|departure|stops)$"),
    sort_dir: str = Query("asc", pattern="^(asc|desc)$"),
):
    day = None
    if date:
        try:
            day = datetime.strptime(date, "%Y-%m-%d")
        except ValueError:
            raise DomainError("Invalid date format, expected YYYY-MM-DD")
    airline_list = [a.strip() for a in airlines.split(",") if a.strip()] if airlines else None
    items, pagination = flight_service.search_flights(
        db,
        paging.page,
        paging.limit,
        origin=origin,
        destination=destination,
        airlines=airline_list,
        min_price=min_price,
        max_price=max_price,
        day=day,
        passengers=passengers,
        seat_class=seat_class.value if seat_class else None,
        max_stops=max_stops,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )
    return {"items": [flight_out(f) for f in items], "pagination": pagination}


@router.get("/{flight_id}", response_model=FlightOut)
def flight_detail(flight_id: int, db: Session = Depends(get_db)):
    return flight_out(flight_service.get_flight_or_404(db, flight_id))


@router.get("/{flight_id}/available-seats")
def available_seats(flight_id: int, db: Session = Depends(get_db)):
    return ticket_service.get_available_seats(db, flight_id)


@router.get("/{flight_id}/booked-seats")
def booked_seats(flight_id: int, db: Session = Depends(get_db)):
    """Seat map view: live seats with their passenger and status."""
    return [
        {"seat_number": t.seat_number, "status": t.status, "passenger": passenger_out(t)}
        for t in ticket_service.get_booked_seats(db, flight_id)
    ]


@router.get("/{flight_id}/ticket-stats", dependencies=[Depends(require_roles("admin"))])
def ticket_stats(flight_id: int, db: Session = Depends(get_db)):
    flight_service.get_flight_or_404(db, flight_id)
    return ticket_service.ticket_stats(db, flight_id)


@router.get("/{flight_id}/tickets", dependencies=[Depends(require_roles("admin"))])
def flight_tickets(
    flight_id: int,
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    status_filter: TicketStatus | None = Query(None, alias="status"),
    sort_by: str = Query("seat_number", pattern="^(seat_number|price|status|created_at)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    flight_service.get_flight_or_404(db, flight_id)
    items, pagination = ticket_service.search_tickets(
        db, paging.page, paging.limit, flight_id=flight_id, status=status_filter, sort_by=sort_by, order=order
    )
    return {"items": [ticket_out(t) for t in items], "pagination": pagination}


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=FlightOut, dependencies=[Depends(require_roles("admin"))])
def create_flight(payload: FlightCreate, db: Session = Depends(get_db)):
    return flight_out(flight_service.create_flight(db, payload))


@router.put("/{flight_id}", response_model=FlightOut, dependencies=[Depends(require_roles("admin"))])
def update_flight(flight_id: int, payload: FlightUpdate, db: Session = Depends(get_db)):
    return flight_out(flight_service.update_flight(db, flight_id, payload))


@router.delete("/{flight_id}", dependencies=[Depends(require_roles("admin"))])
def delete_flight(flight_id: int, db: Session = Depends(get_db)):
    flight_service.delete_flight(db, flight_id)
    return {"status": "deleted"}
