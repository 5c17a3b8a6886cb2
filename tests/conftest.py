import pytest
from fastapi.testclient import TestClient

from fixall.core.config import Settings
from fixall.main import create_app

ADMIN_SECRET = "let-me-in"


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        admin_secret=ADMIN_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(app, client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup(client):
    counter = {"n": 0}

    def _signup(role="customer", name=None, email=None, password="secret123", **extra):
        counter["n"] += 1
        body = {
            "name": name or f"{role.title()} {counter['n']}",
            "email": email or f"{role}{counter['n']}@fixall.io",
            "password": password,
            "role": role,
        }
        if role == "admin":
            body.setdefault("secret", ADMIN_SECRET)
        body.update(extra)
        res = client.post("/api/auth/signup", json=body)
        assert res.status_code == 201, res.text
        data = res.json()
        return data["user"], auth_header(data["token"])

    return _signup


@pytest.fixture
def admin(signup):
    return signup("admin", name="Root Admin")


@pytest.fixture
def customer(signup):
    return signup("customer", name="Carla Customer", phone="555-0100")


@pytest.fixture
def technician(client, signup, admin):
    user, headers = signup("technician", name="Tom Tech", skills=["Plumbing", "Electrical"])
    _, admin_headers = admin
    res = client.put(f"/api/admin/approve/{user['id']}", headers=admin_headers)
    assert res.status_code == 200, res.text
    return res.json()["user"], headers


@pytest.fixture
def make_booking(client, customer, technician):
    def _make(description="Kitchen sink leak", **extra):
        _, customer_headers = customer
        tech, _ = technician
        body = {"tech_id": tech["id"], "description": description}
        body.update(extra)
        res = client.post("/api/customer/book", json=body, headers=customer_headers)
        assert res.status_code == 201, res.text
        return res.json()["booking"]

    return _make
