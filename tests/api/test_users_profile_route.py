from tests.api.helpers import API, SIGNUP


def test_get_user(client, auth_headers):
    response = client.get(f"{API}/users/1", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == SIGNUP["email"]


def test_get_unknown_user(client, auth_headers):
    assert client.get(f"{API}/users/99", headers=auth_headers).status_code == 404


def test_update_profile(client, auth_headers):
    response = client.patch(
        f"{API}/users/1", json={"full_name": "Ana S."}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["full_name"] == "Ana S."
    assert response.json()["phone_number"] == SIGNUP["phone_number"]


def test_password_change_takes_effect_on_next_login(client, auth_headers, login):
    response = client.patch(
        f"{API}/users/1", json={"password": "n3w-pass"}, headers=auth_headers
    )
    assert response.status_code == 200

    old = client.post(
        f"{API}/users/login", json={"email": SIGNUP["email"], "password": "s3cret"}
    )
    assert old.status_code == 401
    assert login(password="n3w-pass")["user_id"] == 1


def test_update_email_to_taken_address(client, auth_headers, signup):
    signup(email="bob@example.com")
    response = client.patch(
        f"{API}/users/1", json={"email": "bob@example.com"}, headers=auth_headers
    )
    assert response.status_code == 409


def test_update_rejects_fields_outside_the_profile(client, auth_headers):
    response = client.patch(
        f"{API}/users/1", json={"email_verified": True}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "email_verified", "message": "is not allowed"}
    ]
