from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from flightbook.api.deps import PageParams, require_roles
from flightbook.api.serializers import aircraft_out
from flightbook.db.session import get_db
from flightbook.models.enums import AircraftStatus
from flightbook.schemas.aircraft import AircraftCreate, AircraftOut, AircraftUpdate
from flightbook.services import aircraft as aircraft_service

router = APIRouter()


@router.get("/")
def list_aircraft(
    db: Session = Depends(get_db),
    paging: PageParams = Depends(),
    status_filter: AircraftStatus | None = Query(None, alias="status"),
    manufacturer: str | None = None,
    model: str | None = None,
    order: str = Query("asc", pattern="^(asc|desc)$"),
):
    items, pagination = aircraft_service.list_aircraft(
        db,
        paging.page,
        paging.limit,
        status=status_filter.value if status_filter else None,
        manufacturer=manufacturer,
        model=model,
        order=order,
    )
    return {"items": [aircraft_out(a) for a in items], "pagination": pagination}


@router.get("/{aircraft_id}", response_model=AircraftOut)
def aircraft_detail(aircraft_id: int, db: Session = Depends(get_db)):
    return aircraft_out(aircraft_service.get_aircraft_or_404(db, aircraft_id))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=AircraftOut, dependencies=[Depends(require_roles("admin"))])
def create_aircraft(payload: AircraftCreate, db: Session = Depends(get_db)):
    return aircraft_out(aircraft_service.create_aircraft(db, payload))


@router.patch("/{aircraft_id}", response_model=AircraftOut, dependencies=[Depends(require_roles("admin"))])
def update_aircraft(aircraft_id: int, payload: AircraftUpdate, db: Session = Depends(get_db)):
    return aircraft_out(aircraft_service.update_aircraft(db, aircraft_id, payload))


@router.delete("/{aircraft_id}", dependencies=[Depends(require_roles("admin"))])
def delete_aircraft(aircraft_id: int, db: Session = Depends(get_db)):
    aircraft_service.delete_aircraft(db, aircraft_id)
    return {"status": "deleted"}
