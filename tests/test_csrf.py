import pytest

from src.services.csrf import (
    SECRET_COOKIE,
    TOKEN_COOKIE,
    create_secret,
    create_token,
    verify_token,
)

PAYLOAD = {"firstname": "Ann", "lastname": "Lee", "email": "a@x.com"}


def _count(client):
    return len(client.get("/contacts").json())


def test_token_round_trip():
    secret = create_secret()

    assert verify_token(secret, create_token(secret))


def test_tokens_are_fresh_each_time():
    secret = create_secret()

    assert create_token(secret) != create_token(secret)


@pytest.mark.parametrize(
    "token",
    [None, "", "no-separator", ".", "salt.", ".signature", "salt.wrong", "sält.ü"],
)
def test_verify_rejects_bad_tokens(token):
    assert not verify_token(create_secret(), token)


def test_verify_rejects_token_from_other_secret():
    assert not verify_token(create_secret(), create_token(create_secret()))


def test_verify_rejects_missing_secret():
    assert not verify_token(None, create_token(create_secret()))


def test_safe_request_issues_cookies_and_header(client):
    response = client.get("/contacts")

    assert response.status_code == 200
    assert response.headers["X-CSRF-Token"]
    set_cookie = response.headers.get_list("set-cookie")
    assert any(c.startswith(f"{SECRET_COOKIE}=") for c in set_cookie)
    token_cookie = next(c for c in set_cookie if c.startswith(f"{TOKEN_COOKIE}="))
    assert "httponly" in token_cookie.lower()
    assert "samesite=lax" in token_cookie.lower()
    assert "secure" not in token_cookie.lower()


def test_every_response_carries_a_new_token(client):
    first = client.get("/health").headers["X-CSRF-Token"]
    second = client.get("/health").headers["X-CSRF-Token"]

    assert first != second


def test_post_without_token_is_rejected_before_store(client):
    client.get("/health")
    before = _count(client)

    response = client.post("/contacts", json=PAYLOAD)

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Invalid CSRF token"}
    assert _count(client) == before


def test_post_with_wrong_token_gets_same_opaque_error(client):
    client.get("/health")

    missing = client.post("/contacts", json=PAYLOAD)
    wrong = client.post("/contacts", json=PAYLOAD, headers={"X-CSRF-Token": "abc.def"})

    assert missing.status_code == wrong.status_code == 403
    assert missing.json() == wrong.json()
    assert _count(client) == 0


def test_token_without_secret_cookie_is_rejected(client):
    token = create_token(create_secret())

    response = client.post("/contacts", json=PAYLOAD, headers={"X-CSRF-Token": token})

    assert response.status_code == 403
    assert _count(client) == 0


def test_rejection_still_issues_a_usable_token(client):
    rejected = client.post("/contacts", json=PAYLOAD)
    token = rejected.headers["X-CSRF-Token"]

    response = client.post("/contacts", json=PAYLOAD, headers={"X-CSRF-Token": token})

    assert rejected.status_code == 403
    assert response.status_code == 201


def test_xsrf_header_alias_is_accepted(client):
    token = client.get("/health").headers["X-CSRF-Token"]

    response = client.post("/contacts", json=PAYLOAD, headers={"X-XSRF-Token": token})

    assert response.status_code == 201


def test_token_in_json_body_is_accepted(client):
    token = client.get("/health").headers["X-CSRF-Token"]

    response = client.post("/contacts", json={**PAYLOAD, "_csrf": token})

    assert response.status_code == 201
    assert "_csrf" not in response.json()


@pytest.mark.parametrize("method", ["put", "delete"])
def test_other_state_changing_verbs_need_token(client, create_contact, method):
    created = create_contact()

    if method == "put":
        response = client.put(f"/contacts/{created['id']}", json=PAYLOAD)
    else:
        response = client.delete(f"/contacts/{created['id']}")

    assert response.status_code == 403
    assert client.get(f"/contacts/{created['id']}").json() == created


def test_production_mode_sets_secure_cookies(settings, store):
    from dataclasses import replace

    from fastapi.testclient import TestClient

    from src.main import create_app

    app = create_app(replace(settings, app_env="production"), store)
    with TestClient(app) as client:
        response = client.get("/health")

    cookies = response.headers.get_list("set-cookie")
    assert cookies
    assert all("secure" in c.lower() for c in cookies)
