from datetime import timedelta

import pytest
from conftest import seed_flight, ticket_item

from flightbook.models.flight import Flight
from flightbook.services import tickets as ticket_service


def issue_one(client, headers, flight_id, seat, quantity=2, booking_id=None, **kw):
    if booking_id is None:
        r = client.post("/bookings/", json={"flight_id": flight_id, "quantity": quantity}, headers=headers)
        booking_id = r.json()["id"]
    r = client.post(
        "/tickets/",
        json={"booking_id": booking_id, "flight_id": flight_id, **ticket_item(seat, **kw)},
        headers=headers,
    )
    return booking_id, r


def test_seat_reuse_after_cancellation(client, user_headers):
    flight_id = seed_flight(seats=4, hours_until_departure=72)
    booking_id, r = issue_one(client, user_headers, flight_id, "2A")
    assert r.status_code == 201, r.text
    first_id = r.json()["id"]

    _, dup = issue_one(client, user_headers, flight_id, "2A", booking_id=booking_id)
    assert dup.status_code == 400
    assert dup.json()["detail"] == "Seat is already booked"

    r = client.post(f"/tickets/{first_id}/cancel", headers=user_headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "cancelled"

    _, again = issue_one(client, user_headers, flight_id, "2A", booking_id=booking_id)
    assert again.status_code == 201, again.text


def test_seat_taken_by_other_booking(client, user_headers, login):
    flight_id = seed_flight(seats=4)
    issue_one(client, user_headers, flight_id, "2B")
    _, r = issue_one(client, login("second@example.com"), flight_id, "2B")
    assert r.status_code == 400
    assert r.json()["code"] == "seat_already_booked"


def test_can_cancel_outside_cutoff(client, user_headers):
    flight_id = seed_flight(seats=2, hours_until_departure=25)
    _, r = issue_one(client, user_headers, flight_id, "1A")
    check = client.get(f"/tickets/{r.json()['id']}/can-cancel", headers=user_headers).json()
    assert check["can_cancel"] is True
    assert check["hours_until_departure"] == pytest.approx(25, abs=0.1)


def test_cannot_cancel_inside_cutoff(client, user_headers):
    flight_id = seed_flight(seats=2, hours_until_departure=10)
    _, r = issue_one(client, user_headers, flight_id, "1A")
    ticket_id = r.json()["id"]

    check = client.get(f"/tickets/{ticket_id}/can-cancel", headers=user_headers).json()
    assert check["can_cancel"] is False
    assert check["hours_until_departure"] == pytest.approx(10, abs=0.1)

    r = client.post(f"/tickets/{ticket_id}/cancel", headers=user_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "cancellation_window_closed"
    assert r.json()["detail"].startswith("Cannot cancel ticket: only allowed before 24h from departure")


def test_cutoff_boundary_uses_strictly_greater(db, client, user_headers):
    flight_id = seed_flight(seats=2, hours_until_departure=48)
    _, r = issue_one(client, user_headers, flight_id, "1A")
    ticket_id = r.json()["id"]
    departure = db.get(Flight, flight_id).departure

    exactly = ticket_service.can_cancel_ticket(db, ticket_id, now=departure - timedelta(hours=24))
    assert exactly == {"can_cancel": False, "hours_until_departure": 24.0}
    before = ticket_service.can_cancel_ticket(db, ticket_id, now=departure - timedelta(hours=24, minutes=1))
    assert before["can_cancel"] is True


def test_used_ticket_is_terminal(client, user_headers, admin_headers):
    flight_id = seed_flight(seats=2)
    _, r = issue_one(client, user_headers, flight_id, "1A")
    ticket_id = r.json()["id"]

    r = client.patch(f"/tickets/{ticket_id}", json={"status": "used"}, headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "used"

    r = client.patch(f"/tickets/{ticket_id}", json={"status": "cancelled"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot change ticket status from used to cancelled"


def test_cancelled_ticket_cannot_be_revived(client, user_headers, admin_headers):
    flight_id = seed_flight(seats=2)
    _, r = issue_one(client, user_headers, flight_id, "1A")
    ticket_id = r.json()["id"]
    client.post(f"/tickets/{ticket_id}/cancel", headers=user_headers)

    r = client.patch(f"/tickets/{ticket_id}", json={"status": "unused"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_status_transition"


def test_reassign_seat(client, user_headers, admin_headers):
    flight_id = seed_flight(seats=4)
    booking_id, r = issue_one(client, user_headers, flight_id, "1A")
    issue_one(client, user_headers, flight_id, "1B", booking_id=booking_id)
    ticket_id = r.json()["id"]

    r = client.patch(f"/tickets/{ticket_id}", json={"seat_number": "1B"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Seat is already booked"

    r = client.patch(f"/tickets/{ticket_id}", json={"seat_number": "1C", "price": 120}, headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["seat_number"] == "1C"
    assert r.json()["price"] == 120.0

    # keeping the same seat is not a conflict with itself
    r = client.patch(f"/tickets/{ticket_id}", json={"seat_number": "1C"}, headers=admin_headers)
    assert r.status_code == 200

    assert client.patch(f"/tickets/{ticket_id}", json={"seat_number": "1D"}, headers=user_headers).status_code == 403


def test_delete_ticket_frees_allocation(client, user_headers, admin_headers):
    flight_id = seed_flight(seats=2)
    booking_id, r = issue_one(client, user_headers, flight_id, "1A", quantity=1)
    ticket_id = r.json()["id"]

    assert client.delete(f"/tickets/{ticket_id}", headers=user_headers).status_code == 403
    r = client.delete(f"/tickets/{ticket_id}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"/tickets/{ticket_id}", headers=admin_headers).status_code == 404

    _, again = issue_one(client, user_headers, flight_id, "1A", booking_id=booking_id)
    assert again.status_code == 201


def test_seat_map_and_stats(client, user_headers, admin_headers):
    flight_id = seed_flight(seats=4)
    booking_id, r = issue_one(client, user_headers, flight_id, "1A", quantity=3)
    issue_one(client, user_headers, flight_id, "1B", booking_id=booking_id)
    client.post(f"/tickets/{r.json()['id']}/cancel", headers=user_headers)

    booked = client.get(f"/flights/{flight_id}/booked-seats").json()
    assert [s["seat_number"] for s in booked] == ["1B"]
    assert booked[0]["passenger"]["name"] == "Jane Doe"

    summary = client.get(f"/flights/{flight_id}/available-seats").json()
    assert summary["seats_available"] == 1
    assert summary["assigned_seats"] == 1
    assert summary["unassigned_seats"] == 2

    stats = client.get(f"/flights/{flight_id}/ticket-stats", headers=admin_headers).json()
    assert stats == {"cancelled": 1, "unused": 1}


def test_search_and_passenger_lookup(client, user_headers, admin_headers):
    flight_id = seed_flight(seats=6)
    booking_id, _ = issue_one(client, user_headers, flight_id, "3A", quantity=3, email="user1@example.com")
    issue_one(client, user_headers, flight_id, "3B", booking_id=booking_id, email="friend@example.com")
    issue_one(client, user_headers, flight_id, "3C", booking_id=booking_id, email="friend@example.com")

    r = client.get("/tickets/search?passenger_email=friend@example.com&order=desc", headers=admin_headers)
    assert r.status_code == 200
    assert [t["seat_number"] for t in r.json()["items"]] == ["3C", "3B"]

    r = client.get(f"/flights/{flight_id}/tickets?limit=2&page=2", headers=admin_headers).json()
    assert [t["seat_number"] for t in r["items"]] == ["3C"]
    assert r["pagination"]["has_prev_page"] is True
    assert r["pagination"]["has_next_page"] is False

    mine = client.get("/tickets/passenger?email=user1@example.com", headers=user_headers).json()
    assert [t["seat_number"] for t in mine["items"]] == ["3A"]
    assert client.get("/tickets/passenger?email=friend@example.com", headers=user_headers).status_code == 403
    assert client.get("/tickets/search", headers=user_headers).status_code == 403


def test_cancelled_booking_cannot_receive_tickets(client, user_headers):
    flight_id = seed_flight(seats=2)
    booking_id = client.post("/bookings/", json={"flight_id": flight_id, "quantity": 1}, headers=user_headers).json()["id"]
    client.post(f"/bookings/{booking_id}/cancel", headers=user_headers)
    _, r = issue_one(client, user_headers, flight_id, "1A", booking_id=booking_id)
    assert r.status_code == 400
    assert r.json()["detail"] == "Booking is cancelled"
