from conftest import ADMIN_SECRET, auth_header


def test_customer_signup_returns_token_and_user(client):
    res = client.post(
        "/api/auth/signup",
        json={"name": "Ann", "email": "Ann@FixAll.io", "password": "secret123", "role": "customer", "phone": "555"},
    )
    assert res.status_code == 201
    data = res.json()
    assert data["token"]
    assert data["message"] == "Account created successfully!"
    assert data["user"]["email"] == "ann@fixall.io"
    assert data["user"]["approved"] is True
    assert data["user"]["skills"] == []
    assert "password_hash" not in data["user"]


def test_technician_signup_starts_unapproved(client):
    res = client.post(
        "/api/auth/signup",
        json={
            "name": "Tess",
            "email": "tess@fixall.io",
            "password": "secret123",
            "role": "technician",
            "skills": ["Plumbing", " ", "HVAC "],
        },
    )
    assert res.status_code == 201
    data = res.json()
    assert data["user"]["approved"] is False
    assert data["user"]["skills"] == ["Plumbing", "HVAC"]
    assert data["message"] == "Account created. Awaiting admin approval."


def test_customer_skills_are_dropped(client):
    res = client.post(
        "/api/auth/signup",
        json={"name": "Cal", "email": "cal@fixall.io", "password": "secret123", "role": "customer", "skills": ["x"]},
    )
    assert res.json()["user"]["skills"] == []


def test_admin_signup_requires_secret(client):
    body = {"name": "Boss", "email": "boss@fixall.io", "password": "secret123", "role": "admin"}
    assert client.post("/api/auth/signup", json=body).status_code == 403
    assert client.post("/api/auth/signup", json={**body, "secret": "wrong"}).status_code == 403

    res = client.post("/api/auth/signup", json={**body, "secret": ADMIN_SECRET})
    assert res.status_code == 201
    assert res.json()["user"]["role"] == "admin"


def test_signup_validation_errors_are_400(client):
    base = {"name": "Val", "email": "val@fixall.io", "password": "secret123", "role": "customer"}
    assert client.post("/api/auth/signup", json={**base, "password": "123"}).status_code == 400
    assert client.post("/api/auth/signup", json={**base, "email": "not-an-email"}).status_code == 400
    assert client.post("/api/auth/signup", json={**base, "role": "superuser"}).status_code == 400
    assert client.post("/api/auth/signup", json={**base, "name": "   "}).status_code == 400
    res = client.post("/api/auth/signup", json={"email": "val@fixall.io"})
    assert res.status_code == 400
    assert "password" in res.json()["detail"]


def test_duplicate_email_rejected(client, signup):
    signup("customer", email="dup@fixall.io")
    res = client.post(
        "/api/auth/signup",
        json={"name": "Other", "email": "DUP@fixall.io", "password": "secret123", "role": "customer"},
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "User with this email already exists"


def test_login_success_and_failures(client, signup):
    signup("customer", email="login@fixall.io", password="hunter22")

    res = client.post("/api/auth/login", json={"email": "login@fixall.io", "password": "hunter22"})
    assert res.status_code == 200
    assert res.json()["message"] == "Login successful"

    res = client.post("/api/auth/login", json={"email": "login@fixall.io", "password": "wrong-pass"})
    assert res.status_code == 401
    res = client.post("/api/auth/login", json={"email": "nobody@fixall.io", "password": "hunter22"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid email or password"


def test_unapproved_technician_cannot_log_in_until_approved(client, signup, admin):
    tech, _ = signup("technician", email="newtech@fixall.io", password="secret123")
    creds = {"email": "newtech@fixall.io", "password": "secret123"}

    res = client.post("/api/auth/login", json=creds)
    assert res.status_code == 403
    assert res.json()["detail"] == "Your account is pending admin approval"

    _, admin_headers = admin
    client.put(f"/api/admin/approve/{tech['id']}", headers=admin_headers)
    assert client.post("/api/auth/login", json=creds).status_code == 200


def test_token_is_required_and_verified(client):
    assert client.get("/api/profile").status_code == 401
    assert client.get("/api/profile", headers=auth_header("garbage")).status_code == 401
    assert client.get("/api/profile", headers={"Authorization": "Basic abc"}).status_code == 401


def test_token_signed_with_other_secret_is_rejected(client, signup, settings):
    from jose import jwt

    user, _ = signup("customer")
    forged = jwt.encode({"sub": str(user["id"]), "role": "admin"}, "not-the-secret", algorithm="HS256")
    assert client.get("/api/profile", headers=auth_header(forged)).status_code == 401


def test_role_guards(client, customer, technician, admin):
    _, customer_headers = customer
    _, tech_headers = technician
    _, admin_headers = admin

    assert client.get("/api/admin/users", headers=customer_headers).status_code == 403
    assert client.get("/api/technician/jobs", headers=customer_headers).status_code == 403
    assert client.get("/api/customer/bookings", headers=tech_headers).status_code == 403
    assert client.get("/api/customer/bookings", headers=admin_headers).status_code == 403


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "OK"
