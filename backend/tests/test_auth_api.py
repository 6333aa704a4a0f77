from tests.fakes import auth_headers, TEST_PASSWORD

PREFIX = "/api/v1"


def register(client, email="new@example.com", name="New User", password="s3cret-pass"):
    return client.post(f"{PREFIX}/auth/register", json={"email": email, "name": name, "password": password})


def login(client, email, password):
    return client.post(f"{PREFIX}/auth/login", data={"username": email, "password": password})


def test_register_then_login(client):
    created = register(client)
    assert created.status_code == 201
    assert created.json()["role"] == "user"
    assert created.json()["name"] == "New User"

    response = login(client, "new@example.com", "s3cret-pass")
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get(f"{PREFIX}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new@example.com"


def test_register_duplicate_email_conflicts(client, user):
    response = register(client, email=user.email)

    assert response.status_code == 409
    assert response.json() == {"detail": "User already exists"}


def test_register_rejects_short_password(client):
    response = register(client, password="short")

    assert response.status_code == 422


def test_login_wrong_password(client, user):
    response = login(client, user.email, "wrong-password")

    assert response.status_code == 401


def test_me_requires_token(client):
    assert client.get(f"{PREFIX}/auth/me").status_code == 401


def test_refresh_returns_new_token(client, user):
    response = client.post(f"{PREFIX}/auth/refresh", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_password_reset_flow(client, user):
    started = client.post(f"{PREFIX}/auth/forgot-password", json={"email": user.email})
    assert started.status_code == 200
    token = started.json()["reset_token"]
    assert token

    bad = client.post(f"{PREFIX}/auth/reset-password", json={
        "email": user.email, "token": "not-the-token", "new_password": "another-pass-123"
    })
    assert bad.status_code == 400

    reset = client.post(f"{PREFIX}/auth/reset-password", json={
        "email": user.email, "token": token, "new_password": "another-pass-123"
    })
    assert reset.status_code == 200

    assert login(client, user.email, TEST_PASSWORD).status_code == 401
    assert login(client, user.email, "another-pass-123").status_code == 200

    reused = client.post(f"{PREFIX}/auth/reset-password", json={
        "email": user.email, "token": token, "new_password": "third-pass-1234"
    })
    assert reused.status_code == 400


def test_forgot_password_unknown_email(client):
    response = client.post(f"{PREFIX}/auth/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 404
