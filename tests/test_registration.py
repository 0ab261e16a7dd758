import pytest

from dailypoll.exceptions import AlreadyRegistered, NotAuthorized
from dailypoll.extensions import db
from dailypoll.models import AuditLog, AuthorizedIdentity, User
from dailypoll.services.registration import register_identity

from conftest import add_identity


def test_unknown_email_is_not_authorized(app):
    with pytest.raises(NotAuthorized):
        register_identity("nobody@x.com", "555")
    assert User.query.count() == 0


def test_first_registration_provisions_account_and_profile(app):
    add_identity(email="alice@x.com", phone="555", gender="female", hostel="Kaveri", full_name="Alice")

    register_identity("alice@x.com", "555")

    identity = AuthorizedIdentity.find_by_email("alice@x.com")
    assert identity.is_registered is True

    user = User.query.filter_by(email="alice@x.com").one()
    assert user.role == User.ROLE_VOTER
    assert user.email_verified is True
    assert user.check_password("555")
    assert user.profile.full_name == "Alice"
    assert user.profile.gender == "female"
    assert user.profile.hostel == "Kaveri"
    assert user.profile.is_visible is True

    assert AuditLog.query.filter_by(action="IDENTITY_REGISTERED").count() == 1


def test_second_registration_is_already_registered(app):
    add_identity(email="alice@x.com", phone="555")
    register_identity("alice@x.com", "555")

    with pytest.raises(AlreadyRegistered):
        register_identity("alice@x.com", "555")
    assert User.query.count() == 1


def test_registered_entry_is_left_untouched(app):
    add_identity(email="bob@x.com", phone="777", gender="male", is_registered=True)

    with pytest.raises(AlreadyRegistered):
        register_identity("bob@x.com", "000")

    identity = AuthorizedIdentity.find_by_email("bob@x.com")
    assert identity.phone == "777"
    assert identity.is_registered is True
    assert User.query.count() == 0


def test_password_is_the_directory_phone_not_the_supplied_one(app):
    add_identity(email="carol@x.com", phone="12345")

    register_identity("carol@x.com", "wrong")

    user = User.query.filter_by(email="carol@x.com").one()
    assert user.check_password("12345")
    assert not user.check_password("wrong")


def test_email_lookup_ignores_case_and_whitespace(app):
    add_identity(email="dave@x.com", phone="1")
    register_identity("  Dave@X.com ", "1")
    assert User.query.filter_by(email="dave@x.com").count() == 1


def test_existing_login_with_same_email_maps_to_already_registered(app):
    add_identity(email="erin@x.com", phone="9")
    user = User(email="erin@x.com", role=User.ROLE_VOTER)
    user.set_password("other")
    db.session.add(user)
    db.session.commit()

    with pytest.raises(AlreadyRegistered):
        register_identity("erin@x.com", "9")
    # the claim was rolled back with the failed insert
    assert AuthorizedIdentity.find_by_email("erin@x.com").is_registered is False


def test_claim_lost_to_a_concurrent_registration(app, monkeypatch):
    add_identity(email="gina@x.com", phone="42")
    # what a second request read before the first one committed its claim
    stale = AuthorizedIdentity.find_by_email("gina@x.com")
    db.session.expunge(stale)
    AuthorizedIdentity.query.filter_by(email="gina@x.com").update({"is_registered": True})
    db.session.commit()
    monkeypatch.setattr(AuthorizedIdentity, "find_by_email", classmethod(lambda cls, email: stale))

    assert stale.is_registered is False
    with pytest.raises(AlreadyRegistered):
        register_identity("gina@x.com", "42")

    assert User.query.count() == 0
    assert AuthorizedIdentity.query.filter_by(email="gina@x.com").one().is_registered is True


def test_user_role_must_be_known(app):
    with pytest.raises(ValueError):
        User(email="root@x.com", role="ROOT")


def test_register_user_endpoint_success(client):
    add_identity(email="alice@x.com", phone="555")

    rv = client.post("/api/auth/register-user", json={"email": "alice@x.com", "phone": "555"})

    assert rv.status_code == 200
    assert rv.get_json() == {"success": True}
    assert rv.headers["Access-Control-Allow-Origin"] == "*"


def test_register_user_endpoint_not_authorized(client):
    rv = client.post("/api/auth/register-user", json={"email": "ghost@x.com", "phone": "1"})

    assert rv.status_code == 403
    assert rv.get_json() == {"error": "Email not authorized"}


def test_register_user_endpoint_already_registered(client):
    add_identity(email="alice@x.com", phone="555", is_registered=True)

    rv = client.post("/api/auth/register-user", json={"email": "alice@x.com", "phone": "555"})

    assert rv.status_code == 400
    assert rv.get_json() == {"error": "Already registered", "already_registered": True}


def test_register_user_endpoint_rejects_missing_fields(client):
    rv = client.post("/api/auth/register-user", json={"email": "alice@x.com"})

    assert rv.status_code == 400
    assert "phone" in rv.get_json()["error"]


def test_register_user_answers_preflight(client):
    rv = client.options("/api/auth/register-user")

    assert rv.status_code == 200
    assert rv.data == b""
    assert rv.headers["Access-Control-Allow-Origin"] == "*"
    assert "content-type" in rv.headers["Access-Control-Allow-Headers"]
