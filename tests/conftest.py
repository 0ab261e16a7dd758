from datetime import date, datetime, time

import pytest

from dailypoll import create_app
from dailypoll.config import Config
from dailypoll.extensions import db
from dailypoll.models import AuthorizedIdentity, Poll, PollOption

TODAY = date(2026, 10, 17)
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough-for-hs256"
    SECRET_KEY = "test-secret"
    POLL_TIMEZONE = None


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def at(monkeypatch):
    """Pin the voting clock: ``at(15, 0)`` makes it 15:00 on TODAY."""
    def _set(hour, minute=0, day=TODAY):
        moment = datetime.combine(day, time(hour, minute))
        monkeypatch.setattr("dailypoll.api.voting.routes.local_now", lambda: moment)
        return moment
    return _set


def add_identity(email="alice@x.com", phone="555", gender="female", hostel="Kaveri",
                 full_name="Alice", is_visible=True, is_registered=False):
    identity = AuthorizedIdentity(
        email=email,
        phone=phone,
        full_name=full_name,
        gender=gender,
        hostel=AuthorizedIdentity.clean_hostel(gender, hostel),
        is_visible=is_visible,
        is_registered=is_registered,
    )
    db.session.add(identity)
    db.session.commit()
    return identity


def add_poll(question="Dinner in the mess today?", day=TODAY, start=time(16, 0), end=time(19, 0),
             options=("Yes", "No"), is_active=True):
    poll = Poll(question=question, poll_date=day, start_time=start, end_time=end, is_active=is_active)
    for i, text in enumerate(options):
        poll.options.append(PollOption(option_text=text, sort_order=i))
    db.session.add(poll)
    db.session.commit()
    return poll


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    rv = client.post("/api/auth/setup-admin", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert rv.status_code == 200
    rv = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert rv.status_code == 200
    return bearer(rv.get_json()["access_token"])


@pytest.fixture
def login_voter(client):
    """Sign a directory member in (registering them on first use) and return auth headers."""
    def _login(email="alice@x.com", phone="555"):
        rv = client.post("/api/auth/login", json={"email": email, "password": phone})
        assert rv.status_code == 200, rv.get_json()
        return bearer(rv.get_json()["access_token"])
    return _login
