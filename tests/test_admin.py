def test_pending_technicians_and_approval(client, signup, admin):
    _, headers = admin
    tech, _ = signup("technician", name="Newbie")

    pending = client.get("/api/admin/pending-technicians", headers=headers).json()
    assert [t["id"] for t in pending] == [tech["id"]]

    res = client.put(f"/api/admin/approve/{tech['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["user"]["approved"] is True
    assert client.get("/api/admin/pending-technicians", headers=headers).json() == []


def test_approve_rejects_missing_or_non_technician(client, admin, customer):
    _, headers = admin
    customer_user, _ = customer

    res = client.put("/api/admin/approve/999", headers=headers)
    assert res.status_code == 404
    assert res.json()["detail"] == "User not found"

    res = client.put(f"/api/admin/approve/{customer_user['id']}", headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Not a technician"


def test_list_users_by_role_and_search(client, signup, admin, customer, technician):
    _, headers = admin
    signup("customer", name="Zelda", email="zelda@example.com")

    def names(**params):
        return sorted(u["name"] for u in client.get("/api/admin/users", params=params, headers=headers).json())

    assert names(role="customer") == ["Carla Customer", "Zelda"]
    assert names(role="technician") == ["Tom Tech"]
    assert names(search="example.com") == ["Zelda"]
    assert names(search="carla") == ["Carla Customer"]
    assert len(names()) == 4


def test_list_bookings(client, admin, technician, make_booking):
    _, headers = admin
    _, tech_headers = technician
    first = make_booking(description="first")
    second = make_booking(description="second")
    client.put(f"/api/technician/start/{first['id']}", headers=tech_headers)

    res = client.get("/api/admin/bookings", headers=headers)
    assert res.status_code == 200
    assert [b["id"] for b in res.json()] == [second["id"], first["id"]]
    assert res.json()[0]["customer"]["name"] == "Carla Customer"
    assert res.json()[0]["tech"]["name"] == "Tom Tech"

    res = client.get("/api/admin/bookings", params={"status": "in-progress"}, headers=headers)
    assert [b["id"] for b in res.json()] == [first["id"]]


def test_stats(client, signup, admin, customer, technician, make_booking):
    _, headers = admin
    _, tech_headers = technician
    signup("technician")

    done = make_booking()
    client.put(f"/api/technician/start/{done['id']}", headers=tech_headers)
    client.put(f"/api/technician/complete/{done['id']}", json={"price": 75}, headers=tech_headers)
    running = make_booking()
    client.put(f"/api/technician/start/{running['id']}", headers=tech_headers)
    make_booking()

    res = client.get("/api/admin/stats", headers=headers)
    assert res.status_code == 200
    data = res.json()
    assert data["users"] == {
        "total": 4,
        "customers": 1,
        "technicians": 2,
        "approved_technicians": 1,
        "pending_technicians": 1,
    }
    assert data["bookings"] == {
        "total": 3,
        "pending": 1,
        "in_progress": 1,
        "completed": 1,
        "cancelled": 0,
        "today": 3,
    }
    assert data["revenue"] == {"total": 75, "average": 75}


def test_stats_with_no_bookings(client, admin):
    _, headers = admin
    data = client.get("/api/admin/stats", headers=headers).json()
    assert data["bookings"]["total"] == 0
    assert data["revenue"] == {"total": 0, "average": 0}


def test_delete_user(client, admin, customer, make_booking):
    _, headers = admin
    customer_user, customer_headers = customer
    make_booking()

    res = client.delete(f"/api/admin/user/{customer_user['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["message"] == "User deleted successfully"

    # the deleted user's bookings go with them and the token stops working
    assert client.get("/api/admin/bookings", headers=headers).json() == []
    assert client.get("/api/profile", headers=customer_headers).status_code == 401


def test_delete_user_guards(client, signup, admin):
    _, headers = admin
    other_admin, _ = signup("admin")

    assert client.delete("/api/admin/user/999", headers=headers).status_code == 404

    res = client.delete(f"/api/admin/user/{other_admin['id']}", headers=headers)
    assert res.status_code == 403
    assert res.json()["detail"] == "Cannot delete admin users"
