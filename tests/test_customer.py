def test_list_technicians_only_shows_approved(client, signup, customer, technician):
    _, headers = customer
    signup("technician", name="Waiting Walt")

    res = client.get("/api/customer/technicians", headers=headers)
    assert res.status_code == 200
    names = [t["name"] for t in res.json()]
    assert names == ["Tom Tech"]


def test_technician_filters(client, customer, technician):
    _, headers = customer
    _, tech_headers = technician

    def names(**params):
        return [t["name"] for t in client.get("/api/customer/technicians", params=params, headers=headers).json()]

    assert names(category="plumbing") == ["Tom Tech"]
    assert names(category="Roofing") == []
    assert names(search="tom") == ["Tom Tech"]
    assert names(search="zed") == []

    client.put("/api/technician/availability", json={"available": False}, headers=tech_headers)
    assert names(available="true") == []
    assert names() == ["Tom Tech"]


def test_technician_profile_includes_reviews(client, customer, technician, signup):
    _, headers = customer
    tech, _ = technician

    res = client.get(f"/api/customer/technician/{tech['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["reviews"] == []
    assert res.json()["average_rating"] == 0.0

    pending, _ = signup("technician")
    assert client.get(f"/api/customer/technician/{pending['id']}", headers=headers).status_code == 404
    assert client.get("/api/customer/technician/999", headers=headers).status_code == 404


def test_create_booking(client, customer, technician):
    customer_user, headers = customer
    tech, _ = technician
    res = client.post(
        "/api/customer/book",
        json={
            "tech_id": tech["id"],
            "description": "  Broken outlet  ",
            "address": "12 Elm St",
            "scheduled_date": "2026-11-02T09:30:00",
            "images": [{"data": "aGVsbG8=", "content_type": "image/png"}],
        },
        headers=headers,
    )
    assert res.status_code == 201
    booking = res.json()["booking"]
    assert booking["description"] == "Broken outlet"
    assert booking["status"] == "pending"
    assert booking["payment"] == "pending"
    assert booking["price"] == 0
    assert booking["customer"]["id"] == customer_user["id"]
    assert booking["tech"]["skills"] == ["Plumbing", "Electrical"]
    assert booking["images"][0]["content_type"] == "image/png"
    assert booking["scheduled_date"].startswith("2026-11-02T09:30")


def test_create_booking_rejects_bad_input(client, signup, customer, technician):
    _, headers = customer
    tech, _ = technician
    pending_tech, _ = signup("technician")

    res = client.post("/api/customer/book", json={"tech_id": pending_tech["id"], "description": "x"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid or unapproved technician"

    res = client.post("/api/customer/book", json={"tech_id": 999, "description": "x"}, headers=headers)
    assert res.status_code == 400

    res = client.post("/api/customer/book", json={"tech_id": tech["id"], "description": "   "}, headers=headers)
    assert res.status_code == 400
    assert "Description is required" in res.json()["detail"]


def test_my_bookings_filter(client, customer, technician, make_booking):
    _, headers = customer
    _, tech_headers = technician
    first = make_booking(description="first")
    second = make_booking(description="second")
    client.put(f"/api/technician/start/{first['id']}", headers=tech_headers)

    all_ids = [b["id"] for b in client.get("/api/customer/bookings", headers=headers).json()]
    assert all_ids == [second["id"], first["id"]]

    res = client.get("/api/customer/bookings", params={"filter": "in-progress"}, headers=headers)
    assert [b["id"] for b in res.json()] == [first["id"]]

    res = client.get("/api/customer/bookings", params={"filter": "all"}, headers=headers)
    assert len(res.json()) == 2


def test_bookings_are_scoped_to_customer(client, signup, make_booking):
    make_booking()
    _, other_headers = signup("customer")
    assert client.get("/api/customer/bookings", headers=other_headers).json() == []


def test_get_single_booking(client, customer, make_booking):
    _, headers = customer
    booking = make_booking()
    res = client.get(f"/api/customer/booking/{booking['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["id"] == booking["id"]
    assert client.get("/api/customer/booking/999", headers=headers).status_code == 404


def test_chat_between_customer_and_technician(client, customer, technician, make_booking):
    _, headers = customer
    _, tech_headers = technician
    booking = make_booking()

    res = client.post(f"/api/customer/booking/{booking['id']}/message", json={"message": " Hi there "}, headers=headers)
    assert res.status_code == 200
    assert res.json()["messages"][0]["message"] == "Hi there"
    assert res.json()["messages"][0]["sender"] == "customer"
    assert res.json()["messages"][0]["sender_name"] == "Carla Customer"

    client.post(f"/api/technician/job/{booking['id']}/message", json={"message": "On my way"}, headers=tech_headers)

    messages = client.get(f"/api/customer/booking/{booking['id']}/messages", headers=headers).json()
    assert [(m["sender"], m["message"]) for m in messages] == [("customer", "Hi there"), ("technician", "On my way")]


def test_empty_message_rejected(client, customer, make_booking):
    _, headers = customer
    booking = make_booking()
    res = client.post(f"/api/customer/booking/{booking['id']}/message", json={"message": "   "}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Message cannot be empty"


def test_clear_history(client, signup, customer, make_booking):
    _, headers = customer
    booking = make_booking()
    make_booking()
    client.post(f"/api/customer/booking/{booking['id']}/message", json={"message": "hello"}, headers=headers)

    res = client.delete("/api/customer/bookings/clear", headers=headers)
    assert res.status_code == 200
    assert res.json()["deleted_count"] == 2
    assert client.get("/api/customer/bookings", headers=headers).json() == []

    _, other_headers = signup("customer")
    assert client.delete("/api/customer/bookings/clear", headers=other_headers).json()["deleted_count"] == 0
