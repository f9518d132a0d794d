# tests/test_api_users.py
from gaadiyaan import crud


def register(client, **overrides):
    payload = {"username": "asha", "email": "asha@example.com", "password": "secret123"}
    payload.update(overrides)
    return client.post("/api/users/register", json=payload)


def login(client, email="asha@example.com", password="secret123"):
    return client.post("/api/users/login", json={"email": email, "password": password})


def test_health_and_root(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["message"] == "Welcome to Gaadiyaan API"


def test_register_and_login(client):
    res = register(client)
    assert res.status_code == 201
    assert res.json()["user"]["role"] == "client"
    assert "password" not in res.text

    res = login(client)
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["email"] == "asha@example.com"

    res = client.get("/api/users/profile", headers={"Authorization": f"Bearer {body['token']}"})
    assert res.status_code == 200
    assert res.json()["user"]["username"] == "asha"


def test_login_with_wrong_password(client):
    register(client)
    res = login(client, password="wrong-password")
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Invalid credentials", "error": "unauthorized"}


def test_register_duplicates_conflict(client):
    register(client)
    assert register(client, email="other@example.com").status_code == 409
    res = register(client, username="other")
    assert res.status_code == 409
    assert res.json()["message"] == "email already exists"


def test_register_dealer_reserves_dealer_id(client, monkeypatch):
    monkeypatch.setattr("gaadiyaan.dealer_ids.current_year", lambda: 2026)
    first = register(client, role="dealer").json()["user"]
    second = register(client, username="ravi", email="ravi@example.com", role="dealer").json()["user"]
    assert first["dealer_id"] == "GD2026001"
    assert second["dealer_id"] == "GD2026002"


def test_register_dealer_with_taken_id(client):
    register(client, role="dealer", dealer_id="GD2024005")
    res = register(client, username="ravi", email="ravi@example.com", role="dealer", dealer_id="GD2024005")
    assert res.status_code == 409


def test_register_cannot_self_assign_admin(client):
    res = register(client, role="admin")
    assert res.status_code == 400
    assert res.json()["fields"] == ["role"]


def test_register_missing_fields(client):
    res = client.post("/api/users/register", json={"username": "asha"})
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"
    assert set(res.json()["fields"]) == {"email", "password"}


def test_profile_requires_token(client):
    res = client.get("/api/users/profile")
    assert res.status_code == 401
    assert client.get("/api/users/profile", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_update_profile(client, make_user, auth_headers):
    user = make_user("asha")
    make_user("ravi")
    headers = auth_headers(user)

    res = client.put("/api/users/profile", json={"username": "ab"}, headers=headers)
    assert res.status_code == 400

    res = client.put("/api/users/profile", json={"username": "ravi"}, headers=headers)
    assert res.status_code == 409

    res = client.put(
        "/api/users/profile",
        json={"username": "asha_r", "dealershipName": "Rao Motors", "phone": "98765", "full_name": "Asha Rao"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["user"]["dealership_name"] == "Rao Motors"
    assert res.json()["user"]["username"] == "asha_r"
    assert res.json()["user"]["email"] == "asha@example.com"


def test_list_users_is_admin_only(client, make_user, auth_headers):
    admin = make_user("root", role="admin")
    client_user = make_user("asha")
    assert client.get("/api/users", headers=auth_headers(client_user)).status_code == 403
    res = client.get("/api/users", headers=auth_headers(admin))
    assert [u["username"] for u in res.json()["users"]] == ["root", "asha"]


def test_generate_dealer_id(client, db, monkeypatch):
    monkeypatch.setattr("gaadiyaan.dealer_ids.current_year", lambda: 2025)
    ids = [client.get("/api/dealers/generate-dealer-id").json()["dealer_id"] for _ in range(3)]
    assert ids == ["GD2025001", "GD2025002", "GD2025003"]


def test_dealer_profile_create_then_update(client):
    payload = {"email": "d@example.com", "full_name": "Asha Rao", "dealer_id": "GD2024003",
               "dealership_name": "Rao Motors", "userType": "dealer"}
    res = client.put("/api/dealers/profile", json=payload)
    assert res.status_code == 200
    assert res.json()["message"] == "Dealer profile created successfully"

    res = client.put("/api/dealers/profile", json={"email": "d@example.com", "full_name": "Asha R", "city": "Pune"})
    assert res.json()["message"] == "Dealer profile updated successfully"
    dealer = res.json()["dealer"]
    assert dealer["full_name"] == "Asha R"
    assert dealer["city"] == "Pune"
    assert dealer["dealership_name"] == "Rao Motors"

    res = client.get("/api/dealers/d@example.com")
    assert res.status_code == 200
    assert res.json()["dealer"]["dealer_id"] == "GD2024003"


def test_dealer_profile_rejects_id_used_by_another_email(client):
    client.put("/api/dealers/profile", json={"email": "a@example.com", "full_name": "A", "dealer_id": "GD2024003"})
    res = client.put("/api/dealers/profile", json={"email": "b@example.com", "full_name": "B", "dealer_id": "GD2024003"})
    assert res.status_code == 409
    assert res.json()["message"] == "This dealer ID is already in use"


def test_dealer_profile_requires_email_and_name(client):
    res = client.put("/api/dealers/profile", json={"email": " ", "full_name": ""})
    assert res.status_code == 400
    assert res.json()["fields"] == ["email", "full_name"]


def test_dealer_profile_not_found(client):
    res = client.get("/api/dealers/nobody@example.com")
    assert res.status_code == 404
    assert res.json()["message"] == "Dealer not found"


def test_claimed_dealer_id_is_skipped_by_generator(client, monkeypatch):
    monkeypatch.setattr("gaadiyaan.dealer_ids.current_year", lambda: 2024)
    client.put("/api/dealers/profile", json={"email": "a@example.com", "full_name": "A", "dealer_id": "GD2024001"})
    assert client.get("/api/dealers/generate-dealer-id").json()["dealer_id"] == "GD2024002"


def test_callbacks(client, db, make_user, auth_headers):
    res = client.post("/api/callbacks", json={"name": "Ravi", "phone": "9810012345"})
    assert res.status_code == 201
    assert res.json()["callback"]["name"] == "Ravi"

    res = client.post("/api/callbacks", json={"name": "Ravi", "phone": "  "})
    assert res.status_code == 400
    assert res.json()["fields"] == ["phone"]

    assert client.get("/api/callbacks").status_code == 401
    admin = make_user("root", role="admin")
    res = client.get("/api/callbacks", headers=auth_headers(admin))
    assert [c["phone"] for c in res.json()["callbacks"]] == ["9810012345"]
    assert len(crud.list_callbacks(db)) == 1


def test_dealer_profile_rejects_id_held_by_another_user(client):
    register(client, role="dealer", dealer_id="GD2024007")
    payload = {"email": "b@example.com", "full_name": "B", "dealer_id": "GD2024007"}
    res = client.put("/api/dealers/profile", json=payload)
    assert res.status_code == 409

    res = client.put("/api/dealers/profile", json=dict(payload, email="asha@example.com", full_name="Asha"))
    assert res.status_code == 200


def test_register_rejects_id_held_by_another_dealer_profile(client):
    client.put("/api/dealers/profile", json={"email": "a@example.com", "full_name": "A", "dealer_id": "GD2024008"})
    res = register(client, role="dealer", dealer_id="GD2024008")
    assert res.status_code == 409
    assert register(client, email="a@example.com", role="dealer", dealer_id="GD2024008").status_code == 201
