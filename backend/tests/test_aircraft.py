from test_flights import flight_payload


def layout(economy=(25, 6), business=(5, 4)):
    config = {}
    if economy:
        config["economy"] = {"rows": economy[0], "seats_per_row": economy[1]}
    if business:
        config["business"] = {"rows": business[0], "seats_per_row": business[1]}
    return config


def register(client, headers, code="A321-01", **kw):
    r = client.post(
        "/aircraft/",
        json={"aircraft_code": code, "model": "A321", "manufacturer": "Airbus", "seat_configuration": kw.pop("config", layout())},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def test_admin_registers_aircraft(client, admin_headers, user_headers):
    body = {"aircraft_code": "A321-01", "model": "A321", "manufacturer": "Airbus", "seat_configuration": layout()}
    assert client.post("/aircraft/", json=body, headers=user_headers).status_code == 403

    r = client.post("/aircraft/", json=body, headers=admin_headers)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["capacity"] == 170
    assert created["status"] == "active"
    assert created["seat_configuration"]["business"] == {"rows": 5, "seats_per_row": 4}

    dup = client.post("/aircraft/", json=body, headers=admin_headers)
    assert dup.status_code == 400
    assert dup.json()["code"] == "aircraft_code_taken"

    listing = client.get("/aircraft/").json()
    assert [a["aircraft_code"] for a in listing["items"]] == ["A321-01"]
    assert client.get(f"/aircraft/{created['id']}").json()["capacity"] == 170
    assert client.get("/aircraft/999").json()["code"] == "aircraft_not_found"


def test_aircraft_needs_a_seat_class(client, admin_headers):
    r = client.post(
        "/aircraft/",
        json={"aircraft_code": "X1", "model": "X", "manufacturer": "Y", "seat_configuration": {}},
        headers=admin_headers,
    )
    assert r.status_code == 422

    r = client.post(
        "/aircraft/",
        json={"aircraft_code": "X1", "model": "X", "manufacturer": "Y", "seat_configuration": {"economy": {"rows": 0, "seats_per_row": 6}}},
        headers=admin_headers,
    )
    assert r.status_code == 422


def test_flight_classes_must_exist_on_aircraft(client, admin_headers):
    aircraft_id = register(client, admin_headers, config=layout(business=None))
    r = client.post("/flights/", json=flight_payload(aircraft_id=aircraft_id), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_aircraft"
    assert r.json()["detail"] == "Seat class business is not configured on aircraft A321-01"


def test_fare_capacity_bounded_by_class_layout(client, admin_headers):
    aircraft_id = register(client, admin_headers, config=layout(economy=(10, 6)))
    r = client.post("/flights/", json=flight_payload(aircraft_id=aircraft_id), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "economy capacity exceeds the aircraft's 60 seats"


def test_flight_seats_default_to_and_stay_within_aircraft_capacity(client, admin_headers):
    aircraft_id = register(client, admin_headers)

    r = client.post(
        "/flights/", json=flight_payload(aircraft_id=aircraft_id, aircraft=None, fare_options=[]), headers=admin_headers
    )
    assert r.status_code == 201, r.text
    assert r.json()["seats_total"] == 170
    assert r.json()["aircraft"] == "A321"
    assert r.json()["aircraft_id"] == aircraft_id

    r = client.post(
        "/flights/",
        json=flight_payload(flight_number="KC902", aircraft_id=aircraft_id, fare_options=[], seats_total=171),
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Total seats exceed aircraft capacity (170)"


def test_unknown_aircraft_is_rejected(client, admin_headers):
    r = client.post("/flights/", json=flight_payload(aircraft_id=404), headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["code"] == "aircraft_not_found"


def test_flight_update_checked_against_aircraft(client, admin_headers):
    aircraft_id = register(client, admin_headers)
    small_id = register(client, admin_headers, code="E190-01", config=layout(economy=(20, 4), business=None))
    flight_id = client.post("/flights/", json=flight_payload(aircraft_id=aircraft_id), headers=admin_headers).json()["id"]

    r = client.put(f"/flights/{flight_id}", json={"seats_total": 171}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_aircraft"

    r = client.put(f"/flights/{flight_id}", json={"aircraft_id": small_id}, headers=admin_headers)
    assert r.status_code == 400

    body = client.get(f"/flights/{flight_id}").json()
    assert body["seats_total"] == 170
    assert body["aircraft_id"] == aircraft_id


def test_aircraft_layout_cannot_shrink_under_its_flights(client, admin_headers):
    aircraft_id = register(client, admin_headers)
    flight_id = client.post("/flights/", json=flight_payload(aircraft_id=aircraft_id), headers=admin_headers).json()["id"]

    r = client.patch(
        f"/aircraft/{aircraft_id}", json={"seat_configuration": layout(economy=(10, 6))}, headers=admin_headers
    )
    assert r.status_code == 400
    assert client.get(f"/aircraft/{aircraft_id}").json()["capacity"] == 170

    r = client.patch(f"/aircraft/{aircraft_id}", json={"status": "maintenance"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "maintenance"

    r = client.delete(f"/aircraft/{aircraft_id}", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "aircraft_in_use"

    assert client.delete(f"/flights/{flight_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/aircraft/{aircraft_id}", headers=admin_headers).status_code == 200
