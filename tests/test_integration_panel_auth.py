"""
Admin panel pages: login, password reset request, dashboard gating,
logout and panel access.
"""


def _session_user_id(client):
    with client.session_transaction() as sess:
        return sess.get("user_id")


def test_login_page_renders_successfully(client):
    r = client.get("/login")
    assert r.status_code == 200
    assert "Sign in" in r.get_data(as_text=True)


def test_password_reset_request_page_renders_successfully(client):
    r = client.get("/password-reset/request")
    assert r.status_code == 200


def test_authenticated_user_can_access_dashboard(acting_as, user_factory):
    user = user_factory()

    r = acting_as(user).get("/")
    assert r.status_code == 200
    assert "Dashboard" in r.get_data(as_text=True)


def test_unauthenticated_user_accessing_dashboard_is_redirected_to_login(client):
    r = client.get("/")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


def test_user_can_logout(acting_as, user_factory, client, gate):
    user = user_factory()

    r = acting_as(user).post("/logout")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")

    assert _session_user_id(client) is None
    with client.session_transaction() as sess:
        assert not gate.authorize(sess).is_authenticated


def test_any_user_can_access_the_panel(app, user_factory):
    user = user_factory()
    panel = app.extensions["panels"].get("app")

    assert user.can_access_panel(panel) is True


def test_logout_without_session_still_redirects(client):
    r = client.post("/logout")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


def test_logout_requires_post(client):
    r = client.get("/logout")
    assert r.status_code == 405


def test_dashboard_shows_signed_in_user(acting_as, user_factory):
    user = user_factory(name="Ada Lovelace")

    body = acting_as(user).get("/").get_data(as_text=True)
    assert "Ada Lovelace" in body
    assert "Sign out" in body


def test_dashboard_blocked_again_after_logout(acting_as, user_factory, client):
    user = user_factory()
    acting_as(user)
    assert client.get("/").status_code == 200

    client.post("/logout")
    r = client.get("/")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


def test_password_reset_request_page_renders_for_signed_in_user(acting_as, user_factory):
    user = user_factory()

    r = acting_as(user).get("/password-reset/request")
    assert r.status_code == 200
    assert "Forgot password?" in r.get_data(as_text=True)
