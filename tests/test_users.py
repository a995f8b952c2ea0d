from library_api.app.core.config import settings

API = "/api/v1"
PASSWORD = "secret123"

UNAUTHENTICATED = {"errors": {"message": ["Unauthenticated."]}}


def test_register_then_login(register, login):
    response = register("test")
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["username"] == "test"
    assert data["email"] == "test@mail.com"
    assert "password" not in data

    response = login("test")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "test"
    assert data["token_type"] == "bearer"
    assert data["access_token"] and data["refresh_token"]
    assert data["expires_in"] == 3600


def test_register_duplicate_username(register):
    register("test")
    response = register("test", email="other@mail.com")
    assert response.status_code == 400
    assert response.json() == {"errors": {"username": ["The username has already been taken."]}}


def test_register_duplicate_email(register):
    register("test")
    response = register("other", email="test@mail.com")
    assert response.status_code == 400
    assert response.json()["errors"]["email"] == ["The email has already been taken."]


def test_register_validation_messages(client):
    response = client.post(
        f"{API}/users/register",
        json={"name": "", "email": "not-an-email", "username": "x", "password": "abc"},
    )
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors["name"] == ["The name field is required."]
    assert errors["email"] == ["The email field must be a valid email address."]
    assert errors["password"] == ["The password field must be at least 5 characters."]


def test_register_password_confirmation_must_match(register):
    response = register("test", password_confirmation="different")
    assert response.status_code == 400
    assert response.json()["errors"]["password_confirmation"] == ["The password field confirmation does not match."]


def test_login_with_wrong_password_or_unknown_user(register, login):
    register("test")
    expected = {"errors": {"message": ["Username or password is incorrect."]}}
    wrong = login("test", "wrong-password")
    assert wrong.status_code == 401
    assert wrong.json() == expected
    unknown = login("nobody")
    assert unknown.status_code == 401
    assert unknown.json() == expected


def test_protected_route_without_token(client):
    response = client.get(f"{API}/users/current")
    assert response.status_code == 401
    assert response.json() == UNAUTHENTICATED
    assert response.headers["www-authenticate"] == "Bearer"


def test_protected_route_with_invalid_token(client):
    response = client.get(f"{API}/users/current", headers={"Authorization": "Bearer abc.def.ghi"})
    assert response.status_code == 401
    assert response.json() == UNAUTHENTICATED


def test_protected_route_with_expired_token(client, register, login, monkeypatch):
    monkeypatch.setattr(settings, "access_token_expire_minutes", -1)
    register("test")
    token = login("test").json()["data"]["access_token"]
    response = client.get(f"{API}/users/current", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == UNAUTHENTICATED
    assert response.headers["www-authenticate"] == "Bearer"


def test_refresh_token_is_not_an_access_token(client, register, login):
    register("test")
    refresh = login("test").json()["data"]["refresh_token"]
    response = client.get(f"{API}/users/current", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 401


def test_current_user_with_contacts_and_addresses(client, headers):
    contact = client.post(f"{API}/contacts", json={"first_name": "Ana"}, headers=headers).json()["data"]
    client.post(
        f"{API}/contacts/{contact['id']}/addresses",
        json={"country": "Indonesia", "city": "Makassar"},
        headers=headers,
    )
    response = client.get(f"{API}/users/current", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "test"
    assert data["user_category_id"] is None
    contacts = data["relationships"]["contacts"]
    assert [c["first_name"] for c in contacts] == ["Ana"]
    assert contacts[0]["addresses"][0]["city"] == "Makassar"


def test_partial_update_changes_only_supplied_fields(client, headers):
    response = client.patch(f"{API}/users/current", json={"name": "Renamed"}, headers=headers)
    assert response.status_code == 200
    data = client.get(f"{API}/users/current", headers=headers).json()["data"]
    assert data["name"] == "Renamed"
    assert data["username"] == "test"
    assert data["email"] == "test@mail.com"


def test_update_password_is_rehashed(client, headers, login):
    client.patch(f"{API}/users/current", json={"password": "new-secret"}, headers=headers)
    assert login("test", PASSWORD).status_code == 401
    assert login("test", "new-secret").status_code == 200


def test_update_to_taken_username(client, auth):
    auth("other")
    headers = auth("test")
    response = client.patch(f"{API}/users/current", json={"username": "other"}, headers=headers)
    assert response.status_code == 400
    assert "username" in response.json()["errors"]


def test_refresh_flow(client, register, login):
    register("test")
    refresh = login("test").json()["data"]["refresh_token"]
    response = client.post(f"{API}/users/refresh", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    new_headers = {"Authorization": f"Bearer {body['access_token']}"}
    assert client.get(f"{API}/users/current", headers=new_headers).status_code == 200


def test_refresh_without_token(client):
    response = client.post(f"{API}/users/refresh")
    assert response.status_code == 400
    assert response.json() == {"errors": {"message": ["Token not provided."]}}


def test_refresh_with_access_token_is_rejected(client, headers):
    response = client.post(f"{API}/users/refresh", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"errors": {"message": ["Failed to refresh token. Please login again."]}}


def test_logout_revokes_the_token(client, headers):
    response = client.delete(f"{API}/users/logout", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"data": True}
    again = client.get(f"{API}/users/current", headers=headers)
    assert again.status_code == 401
    assert again.json() == UNAUTHENTICATED


def test_logout_can_revoke_the_refresh_token(client, register, login):
    register("test")
    tokens = login("test").json()["data"]
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    response = client.request(
        "DELETE", f"{API}/users/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers
    )
    assert response.status_code == 200
    refreshed = client.post(
        f"{API}/users/refresh", headers={"Authorization": f"Bearer {tokens['refresh_token']}"}
    )
    assert refreshed.status_code == 401
