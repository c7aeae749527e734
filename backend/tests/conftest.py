import os
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest

# Settings are read at import time, so the database must be configured first.
_tmpdir = tempfile.mkdtemp(prefix="flightbook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_tmpdir) / 'test.db'}"
os.environ["ENV"] = "test"
os.environ["ADMIN_EMAILS"] = "boss@example.com"

from fastapi.testclient import TestClient  # noqa: E402

from flightbook.core.clock import utcnow  # noqa: E402
from flightbook.core.security import get_password_hash  # noqa: E402
from flightbook.db.session import SessionLocal, engine  # noqa: E402
from flightbook.main import app  # noqa: E402
from flightbook.models import Base, FareOption, Flight, User  # noqa: E402

PASSWORD = "testpass1"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def ensure_user(email: str, role: str = "user") -> int:
    session = SessionLocal()
    try:
        u = session.query(User).filter(User.email == email).first()
        if not u:
            u = User(email=email, full_name=email.split("@")[0], hashed_password=get_password_hash(PASSWORD), role=role, is_active=True)
            session.add(u)
            session.commit()
        return u.id
    finally:
        session.close()


def seed_flight(
    seats: int = 5,
    price: float = 100.0,
    hours_until_departure: float = 72,
    flight_number: str = "DA100",
    origin: str = "AAA",
    destination: str = "BBB",
    fare_options: list[dict] | None = None,
    **extra,
) -> int:
    session = SessionLocal()
    try:
        departure = utcnow() + timedelta(hours=hours_until_departure)
        f = Flight(
            airline=extra.pop("airline", "DemoAir"),
            flight_number=flight_number,
            origin=origin,
            destination=destination,
            departure=departure,
            arrival=departure + timedelta(hours=2),
            price=price,
            seats_total=seats,
            seats_available=extra.pop("seats_available", seats),
            **extra,
        )
        for fo in fare_options or []:
            f.fare_options.append(FareOption(seats_available=fo["capacity"], **fo))
        session.add(f)
        session.commit()
        return f.id
    finally:
        session.close()


def flight_seats(flight_id: int) -> int:
    session = SessionLocal()
    try:
        return session.get(Flight, flight_id).seats_available
    finally:
        session.close()


def passenger(name: str = "Jane Doe", email: str = "jane@example.com") -> dict:
    return {
        "name": name,
        "email": email,
        "phone": "0123456789",
        "date_of_birth": date(1990, 5, 17).isoformat(),
        "gender": "female",
        "nationality": "KZ",
        "passport_number": "N1234567",
    }


def ticket_item(seat: str, price: float = 100.0, **kw) -> dict:
    return {"seat_number": seat, "price": price, "passenger": passenger(**kw)}


@pytest.fixture
def login(client):
    def _login(email: str = "user1@example.com", role: str = "user") -> dict:
        ensure_user(email, role)
        r = client.post("/auth/login-json", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login


@pytest.fixture
def user_headers(login):
    return login("user1@example.com")


@pytest.fixture
def admin_headers(login):
    return login("admin@example.com", role="admin")
