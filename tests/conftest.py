import sys, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import itertools

import pytest

from paneldash import create_app
from paneldash.config import TestingConfig
from paneldash.extensions import limiter
from paneldash.models.store import Store
from paneldash.models.user import User
from paneldash.utils.security import generate_hash

_seq = itertools.count(1)


@pytest.fixture
def outbox():
    """Reset links handed to the notifier, as (user, token) pairs."""
    return []


@pytest.fixture
def store():
    """A fresh in-memory credential store per test."""
    return Store(None)


@pytest.fixture
def app(store, outbox):
    app = create_app(
        TestingConfig,
        store=store,
        overrides={"PASSWORD_RESET_NOTIFIER": lambda user, token: outbox.append((user, token))},
    )
    yield app
    limiter.reset()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def gate(app):
    return app.extensions["auth_gate"]


@pytest.fixture
def user_factory(store):
    """
    Create users the way a model factory would: unique name/email, and
    the password "password" unless told otherwise.
    """
    def make(name=None, email=None, password="password") -> User:
        n = next(_seq)
        uid = store.create_user(
            name or f"User {n}",
            email or f"user{n}@example.com",
            generate_hash(password),
        )
        return User.from_dict(store.get_user(uid))

    return make


@pytest.fixture
def acting_as(client, gate):
    """Sign the test client in as `user` without going through the form."""
    def act(user, password="password"):
        with client.session_transaction() as sess:
            gate.login(sess, user.email, password)
        return client

    return act
