from library_api.app.core import db
from library_api.app.core.config import settings
from library_api.app.core.query import Predicate

API = "/api/v1"
NOT_FOUND = {"errors": {"message": ["not found."]}}
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _create(client, headers, **fields):
    payload = {"first_name": "Test", "last_name": "User", "email": "test_user@mail.com", "phone": "1234567890"}
    payload.update(fields)
    response = client.post(f"{API}/contacts", json=payload, headers=headers)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def test_create_contact(client, headers):
    response = client.post(
        f"{API}/contacts",
        json={"first_name": "Test", "last_name": "User", "gender": "female", "email": "test_user@mail"},
        headers=headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["first_name"] == "Test"
    assert data["gender"] == "female"
    assert data["profile_image"] is None
    assert data["user_id"] == client.get(f"{API}/users/current", headers=headers).json()["data"]["id"]


def test_create_contact_validation(client, headers):
    response = client.post(
        f"{API}/contacts",
        json={"first_name": "", "email": "salah,email", "gender": "other"},
        headers=headers,
    )
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors["first_name"] == ["The first name field is required."]
    assert errors["email"] == ["The email field must be a valid email address."]
    assert errors["gender"] == ["The selected gender is invalid."]


def test_create_requires_token(client):
    response = client.post(f"{API}/contacts", json={"first_name": "Test"})
    assert response.status_code == 401


def test_list_returns_only_own_contacts(client, auth):
    mine = auth("mine")
    theirs = auth("theirs")
    _create(client, mine, first_name="Mine")
    _create(client, theirs, first_name="Theirs")
    body = client.get(f"{API}/contacts", headers=mine).json()
    assert "meta" not in body
    assert [c["first_name"] for c in body["data"]] == ["Mine"]


def test_get_contact(client, headers):
    contact = _create(client, headers)
    response = client.get(f"{API}/contacts/{contact['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"] == contact


def test_missing_and_foreign_contacts_look_the_same(client, auth):
    owner = auth("owner")
    intruder = auth("intruder")
    contact = _create(client, owner)
    cid = contact["id"]

    for method, kwargs in (
        ("GET", {}),
        ("PUT", {"json": {"first_name": "Hacked"}}),
        ("DELETE", {}),
    ):
        foreign = client.request(method, f"{API}/contacts/{cid}", headers=intruder, **kwargs)
        missing = client.request(method, f"{API}/contacts/{cid + 100}", headers=owner, **kwargs)
        assert foreign.status_code == missing.status_code == 404
        assert foreign.json() == missing.json() == NOT_FOUND

    assert client.get(f"{API}/contacts/{cid}", headers=owner).json()["data"]["first_name"] == "Test"


def test_partial_update_keeps_other_fields(client, headers):
    contact = _create(client, headers)
    response = client.put(f"{API}/contacts/{contact['id']}", json={"first_name": "Changed"}, headers=headers)
    assert response.status_code == 200
    refetched = client.get(f"{API}/contacts/{contact['id']}", headers=headers).json()["data"]
    assert refetched["first_name"] == "Changed"
    for field in ("last_name", "email", "phone", "gender", "user_id"):
        assert refetched[field] == contact[field]


def test_delete_cascades_to_addresses(client, headers):
    contact = _create(client, headers)
    for city in ("Makassar", "Jakarta"):
        client.post(
            f"{API}/contacts/{contact['id']}/addresses",
            json={"country": "Indonesia", "city": city},
            headers=headers,
        )
    assert db.count_by_predicate("addresses", Predicate.equals("contact_id", contact["id"])) == 2

    response = client.delete(f"{API}/contacts/{contact['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"data": True}
    assert client.get(f"{API}/contacts/{contact['id']}", headers=headers).status_code == 404
    assert db.count_by_predicate("addresses", Predicate.equals("contact_id", contact["id"])) == 0


def test_search_by_name_matches_first_or_last_name(client, headers):
    _create(client, headers, first_name="John", last_name="Doe")
    _create(client, headers, first_name="Mary", last_name="Johnson")
    _create(client, headers, first_name="Peter", last_name="Pan")
    response = client.get(f"{API}/contacts/search", params={"name": "JOHN"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert [c["first_name"] for c in body["data"]] == ["John", "Mary"]
    assert body["meta"]["total"] == 2


def test_search_fields_are_anded(client, headers):
    _create(client, headers, first_name="John", phone="0811")
    _create(client, headers, first_name="John", phone="0822")
    body = client.get(f"{API}/contacts/search", params={"name": "john", "phone": "0822"}, headers=headers).json()
    assert [c["phone"] for c in body["data"]] == ["0822"]


def test_search_without_params_pages_all_own_contacts(client, auth):
    headers = auth("owner")
    other = auth("other")
    for i in range(15):
        _create(client, headers, first_name=f"First{i}")
    _create(client, other, first_name="Hidden")

    body = client.get(f"{API}/contacts/search", headers=headers).json()
    assert len(body["data"]) == 10
    assert body["meta"]["total"] == 15
    assert body["meta"]["current_page"] == 1
    assert body["meta"]["last_page"] == 2

    body = client.get(f"{API}/contacts/search", params={"page": 2, "size": 10}, headers=headers).json()
    assert [c["first_name"] for c in body["data"]] == [f"First{i}" for i in range(10, 15)]


def test_search_with_no_match_is_empty_not_404(client, headers):
    _create(client, headers)
    response = client.get(f"{API}/contacts/search", params={"email": "nobody@nowhere"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"] == []
    assert response.json()["meta"]["total"] == 0


def test_search_rejects_bad_page_size(client, headers):
    response = client.get(f"{API}/contacts/search", params={"size": 0}, headers=headers)
    assert response.status_code == 400
    assert "size" in response.json()["errors"]


def test_contact_limit_when_configured(client, headers, monkeypatch):
    monkeypatch.setattr(settings, "max_contacts_per_user", 1)
    _create(client, headers)
    response = client.post(f"{API}/contacts", json={"first_name": "Second"}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"errors": {"contact": ["A user may have at most 1 contact."]}}


def test_profile_image_upload_and_replace(client, headers, isolated_settings):
    contact = _create(client, headers)
    response = client.put(
        f"{API}/contacts/{contact['id']}/profile_image",
        content=PNG,
        headers={**headers, "Content-Type": "image/png"},
    )
    assert response.status_code == 200
    url = response.json()["data"]["profile_image"]
    assert url.startswith("/storage/contact_images/") and url.endswith(".png")
    assert client.get(url).content == PNG

    first_file = isolated_settings / "storage" / url[len("/storage/"):]
    assert first_file.exists()
    response = client.put(
        f"{API}/contacts/{contact['id']}/profile_image",
        content=b"GIF89a",
        headers={**headers, "Content-Type": "image/gif"},
    )
    assert response.json()["data"]["profile_image"].endswith(".gif")
    assert not first_file.exists()


def test_profile_image_rejects_non_images(client, headers):
    contact = _create(client, headers)
    response = client.put(
        f"{API}/contacts/{contact['id']}/profile_image",
        content=b"hello",
        headers={**headers, "Content-Type": "text/plain"},
    )
    assert response.status_code == 400
    assert "profile_image" in response.json()["errors"]


def test_deleting_contact_removes_its_image(client, headers, isolated_settings):
    contact = _create(client, headers)
    url = client.put(
        f"{API}/contacts/{contact['id']}/profile_image",
        content=PNG,
        headers={**headers, "Content-Type": "image/png"},
    ).json()["data"]["profile_image"]
    client.delete(f"{API}/contacts/{contact['id']}", headers=headers)
    assert not (isolated_settings / "storage" / url[len("/storage/"):]).exists()


def test_id_beyond_integer_range_is_not_found(client, headers):
    for method in ("GET", "PUT", "DELETE"):
        kwargs = {"json": {"first_name": "X"}} if method == "PUT" else {}
        response = client.request(method, f"{API}/contacts/{10 ** 20}", headers=headers, **kwargs)
        assert response.status_code == 404
        assert response.json() == NOT_FOUND
    response = client.get(f"{API}/contacts/{10 ** 20}/addresses", headers=headers)
    assert response.status_code == 404


def test_oversized_profile_image_is_refused(client, headers, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 1024)
    contact = _create(client, headers)
    response = client.put(
        f"{API}/contacts/{contact['id']}/profile_image",
        content=PNG + b"\x00" * 2048,
        headers={**headers, "Content-Type": "image/png"},
    )
    assert response.status_code == 400
    assert response.json() == {"errors": {"profile_image": ["The profile image field must not be greater than 1 kilobytes."]}}
    assert client.get(f"{API}/contacts/{contact['id']}", headers=headers).json()["data"]["profile_image"] is None
