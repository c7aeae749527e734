from datetime import timedelta
import logging

from flightbook.core.clock import utcnow
from flightbook.core.config import settings
from flightbook.core.security import get_password_hash
from flightbook.db.session import engine, SessionLocal
from flightbook.models import Aircraft, Base, FareOption, Flight, User
from flightbook.models.enums import UserRole

logger = logging.getLogger(__name__)


def create_tables():
    Base.metadata.create_all(bind=engine)


def _ensure_aircraft(db, code: str, model: str, manufacturer: str, layout: dict) -> Aircraft:
    aircraft = db.query(Aircraft).filter(Aircraft.aircraft_code == code).first()
    if not aircraft:
        aircraft = Aircraft(aircraft_code=code, model=model, manufacturer=manufacturer, seat_configuration=layout)
        db.add(aircraft)
        db.flush()
    return aircraft


def seed_demo_data():
    """Idempotently seed a default admin and, on an empty database, two demo flights."""
    db = SessionLocal()
    try:
        admin_email = (settings.seed_admin_email or "admin@example.com").lower()
        admin_pwd = settings.seed_admin_password or "Admin1234!"

        admin = db.query(User).filter(User.email == admin_email).first()
        if not admin:
            db.add(
                User(
                    email=admin_email,
                    full_name="Admin",
                    hashed_password=get_password_hash(admin_pwd),
                    role=UserRole.admin.value,
                    is_active=True,
                )
            )
            db.commit()
            logger.info("seeded admin %s", admin_email)

        if db.query(Flight).count() == 0:
            a320 = _ensure_aircraft(
                db, "A320-01", "A320", "Airbus",
                {"economy": {"rows": 25, "seats_per_row": 6}, "business": {"rows": 5, "seats_per_row": 6}},
            )
            b737 = _ensure_aircraft(
                db, "B737-01", "B737", "Boeing",
                {"economy": {"rows": 24, "seats_per_row": 6}, "business": {"rows": 4, "seats_per_row": 4}},
            )
            now = utcnow().replace(minute=0, second=0, microsecond=0)
            flights = [
                Flight(
                    flight_number="DA101", airline="DemoAir", aircraft=a320.model, aircraft_id=a320.id,
                    origin="ALA", destination="NQZ",
                    departure=now + timedelta(days=3), arrival=now + timedelta(days=3, hours=1, minutes=30),
                    price=39.00, seats_total=180, seats_available=180,
                    fare_options=[
                        FareOption(seat_class="economy", price=39.00, capacity=150, seats_available=150),
                        FareOption(seat_class="business", price=119.00, capacity=30, seats_available=30),
                    ],
                ),
                Flight(
                    flight_number="DA202", airline="DemoAir", aircraft=b737.model, aircraft_id=b737.id,
                    origin="ALA", destination="DXB",
                    departure=now + timedelta(days=5), arrival=now + timedelta(days=5, hours=4, minutes=30),
                    price=129.00, seats_total=b737.capacity, seats_available=b737.capacity, stops=1,
                ),
            ]
            db.add_all(flights)
            db.commit()
            logger.info("seeded %s demo flights", len(flights))
    finally:
        db.close()
