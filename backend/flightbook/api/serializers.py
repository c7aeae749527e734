"""ORM rows -> JSON-ready dicts (bookkeeping columns are left out)."""
from flightbook.models.aircraft import Aircraft
from flightbook.models.booking import Booking
from flightbook.models.flight import Flight
from flightbook.models.payment import Payment
from flightbook.models.ticket import Ticket
from flightbook.models.user import User


def flight_out(f: Flight) -> dict:
    return {
        "id": f.id,
        "flight_number": f.flight_number,
        "airline": f.airline,
        "aircraft": f.aircraft,
        "aircraft_id": f.aircraft_id,
        "origin": f.origin,
        "destination": f.destination,
        "departure": f.departure,
        "arrival": f.arrival,
        "duration_minutes": f.duration_minutes,
        "price": float(f.price),
        "seats_total": f.seats_total,
        "seats_available": f.seats_available,
        "stops": f.stops,
        "is_active": f.is_active,
        "fare_options": [
            {
                "seat_class": fo.seat_class,
                "price": float(fo.price),
                "capacity": fo.capacity,
                "seats_available": fo.seats_available,
                "perks": list(fo.perks or []),
            }
            for fo in f.fare_options
        ],
    }


def booking_out(b: Booking) -> dict:
    return {
        "id": b.id,
        "user_id": b.user_id,
        "flight_id": b.flight_id,
        "seat_class": b.seat_class,
        "quantity": b.quantity,
        "total_price": float(b.total_price),
        "status": b.status,
        "payment_status": b.payment_status,
        "booking_time": b.booking_time,
    }


def passenger_out(t: Ticket) -> dict:
    return {
        "name": t.passenger_name,
        "email": t.passenger_email,
        "phone": t.passenger_phone,
        "date_of_birth": t.passenger_date_of_birth,
        "gender": t.passenger_gender,
        "nationality": t.passenger_nationality,
        "passport_number": t.passenger_passport_number,
        "id_number": t.passenger_id_number,
    }


def ticket_out(t: Ticket) -> dict:
    return {
        "id": t.id,
        "booking_id": t.booking_id,
        "flight_id": t.flight_id,
        "user_id": t.user_id,
        "seat_class": t.seat_class,
        "seat_number": t.seat_number,
        "price": float(t.price),
        "status": t.status,
        "passenger": passenger_out(t),
        "created_at": t.created_at,
        "updated_at": t.updated_at,
    }


def payment_out(p: Payment) -> dict:
    return {
        "id": p.id,
        "booking_id": p.booking_id,
        "user_id": p.user_id,
        "amount": float(p.amount),
        "method": p.method,
        "status": p.status,
        "transaction_id": p.transaction_id,
        "payment_date": p.payment_date,
        "created_at": p.created_at,
    }


def user_out(u: User) -> dict:
    return {"id": u.id, "email": u.email, "full_name": u.full_name, "role": u.role, "is_active": u.is_active}


def aircraft_out(a: Aircraft) -> dict:
    return {
        "id": a.id,
        "aircraft_code": a.aircraft_code,
        "model": a.model,
        "manufacturer": a.manufacturer,
        "seat_configuration": dict(a.seat_configuration or {}),
        "capacity": a.capacity,
        "status": a.status,
        "created_at": a.created_at,
    }
