from datetime import timedelta

from app.domain import services as domain_services
from tests.api.helpers import API


def _backdate_last_code(uow, user_id: int, seconds: int = 3600) -> None:
    row = uow.db_users.rows[user_id]
    row.last_code_sent_at = row.last_code_sent_at - timedelta(seconds=seconds)


def test_verify_email_with_numeric_code(client, signup):
    user = signup()

    # JSON numbers lose the leading zero of "012345"
    response = client.post(f"{API}/users/{user['id']}/verify-email", json={"code": 12345})

    assert response.status_code == 200
    assert response.json()["email_verified"] is True


def test_verify_email_wrong_code(client, signup, uow):
    user = signup()

    response = client.post(f"{API}/users/{user['id']}/verify-email", json={"code": 999999})

    assert response.status_code == 400
    assert response.json() == {"detail": "invalid verification code"}
    assert uow.db_users.rows[user["id"]].email_verified is False


def test_code_is_single_use(client, signup):
    user = signup()
    url = f"{API}/users/{user['id']}/verify-email"

    assert client.post(url, json={"code": 12345}).status_code == 200
    assert client.post(url, json={"code": 12345}).status_code == 400


def test_verify_email_needs_no_token_but_validates_body(client, signup):
    user = signup()

    response = client.post(f"{API}/users/{user['id']}/verify-email", json={"code": "abc"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "code"


def test_verify_email_unknown_user(client):
    assert client.post(f"{API}/users/404/verify-email", json={"code": 1}).status_code == 404
    assert client.post(f"{API}/users/abc/verify-email", json={"code": 1}).status_code == 404


def test_resend_is_throttled(client, signup, uow):
    user = signup()

    response = client.post(f"{API}/users/{user['id']}/verification-code")

    assert response.status_code == 429
    assert len(uow.outbox.enqueues) == 1


def test_resend_replaces_the_pending_code(client, signup, uow, monkeypatch):
    user = signup()
    _backdate_last_code(uow, user["id"])
    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda digits=6: "777777"
    )

    response = client.post(f"{API}/users/{user['id']}/verification-code")
    assert response.status_code == 202
    assert response.json() == {"status": "accepted"}
    assert len(uow.outbox.enqueues) == 2
    assert "777777" in uow.outbox.enqueues[-1][1]["body"]

    url = f"{API}/users/{user['id']}/verify-email"
    assert client.post(url, json={"code": 12345}).status_code == 400
    assert client.post(url, json={"code": 777777}).status_code == 200


def test_resend_after_verification_is_refused(client, signup, uow):
    user = signup()
    client.post(f"{API}/users/{user['id']}/verify-email", json={"code": 12345})
    _backdate_last_code(uow, user["id"])

    response = client.post(f"{API}/users/{user['id']}/verification-code")

    assert response.status_code == 400
    assert response.json() == {"detail": "email already verified"}
