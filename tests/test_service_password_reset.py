from datetime import datetime, timedelta, timezone

import pytest

from paneldash.exceptions import InvalidResetToken, PasswordPolicyError
from paneldash.services.password_reset import PasswordResetService


class FakeNow:
    def __init__(self):
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def now():
    return FakeNow()


@pytest.fixture
def service(store, now):
    sent = []
    svc = PasswordResetService(store, expiry_minutes=60, min_length=8,
                               notifier=lambda u, t: sent.append((u, t)), now=now)
    svc.sent = sent
    return svc


def test_request_reset_for_unknown_email_sends_nothing(service):
    assert service.request_reset("ghost@example.com") is None
    assert service.sent == []


def test_request_reset_notifies_user(service, user_factory):
    user = user_factory()

    token = service.request_reset(user.email)
    assert token
    assert service.sent == [(user, token)]
    assert service.verify(token) == user


def test_new_request_invalidates_previous_token(service, user_factory):
    user = user_factory()

    old = service.request_reset(user.email)
    new = service.request_reset(user.email)
    assert service.verify(old) is None
    assert service.verify(new) == user


def test_token_expires(service, user_factory, now):
    user = user_factory()
    token = service.request_reset(user.email)

    now.now += timedelta(minutes=60)
    assert service.verify(token) is None


def test_reset_changes_password_and_burns_token(service, user_factory, store):
    user = user_factory()
    token = service.request_reset(user.email)

    service.reset(token, "new-secret-1", "new-secret-1")

    assert store.verify_credentials(user.email, "new-secret-1")
    assert not store.verify_credentials(user.email, "password")
    with pytest.raises(InvalidResetToken):
        service.reset(token, "another-one", "another-one")


def test_reset_enforces_policy(service, user_factory, store):
    user = user_factory()
    token = service.request_reset(user.email)

    with pytest.raises(PasswordPolicyError):
        service.reset(token, "short", "short")
    with pytest.raises(PasswordPolicyError):
        service.reset(token, "long-enough-1", "long-enough-2")

    # token survives a policy failure
    assert service.verify(token) == user
    assert store.verify_credentials(user.email, "password")


def test_reset_with_bogus_token(service):
    with pytest.raises(InvalidResetToken):
        service.reset("bogus", "whatever-123", "whatever-123")


# ---------- routes ----------

def test_request_form_same_message_for_known_and_unknown(client, user_factory, outbox):
    user_factory(email="hal@example.com")

    known = client.post("/password-reset/request", data={"email": "hal@example.com"}, follow_redirects=True)
    unknown = client.post("/password-reset/request", data={"email": "nope@example.com"}, follow_redirects=True)

    assert known.status_code == unknown.status_code == 200
    msg = "If that email belongs to an account"
    assert msg in known.get_data(as_text=True)
    assert msg in unknown.get_data(as_text=True)
    assert len(outbox) == 1


def test_reset_page_with_invalid_token_redirects_to_request(client):
    r = client.get("/password-reset/reset?token=bogus")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/password-reset/request")


def test_full_reset_flow_then_sign_in(client, user_factory, outbox):
    user_factory(email="ivy@example.com")
    client.post("/password-reset/request", data={"email": "ivy@example.com"})
    (_, token), = outbox

    r = client.get(f"/password-reset/reset?token={token}")
    assert r.status_code == 200
    assert "ivy@example.com" in r.get_data(as_text=True)

    r = client.post("/password-reset/reset", data={
        "token": token, "password": "brand-new-pw", "password_confirmation": "mismatch-pw",
    })
    assert r.status_code == 422
    assert "does not match" in r.get_data(as_text=True)

    r = client.post("/password-reset/reset", data={
        "token": token, "password": "brand-new-pw", "password_confirmation": "brand-new-pw",
    })
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")

    r = client.post("/login", data={"email": "ivy@example.com", "password": "brand-new-pw"})
    assert r.status_code == 302
    assert client.get("/").status_code == 200


def test_reset_signs_out_existing_sessions(acting_as, user_factory, client, app):
    user = user_factory()
    acting_as(user)
    assert client.get("/").status_code == 200

    service = app.extensions["password_reset"]
    token = service.request_reset(user.email)
    service.reset(token, "newpassword1", "newpassword1")

    r = client.get("/")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")
