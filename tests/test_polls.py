from datetime import datetime, time

from dailypoll.models import Poll, PollOption, User, Vote
from dailypoll.services.registration import register_identity
from dailypoll.services.voting import cast_vote

from conftest import TODAY, add_identity, add_poll

NEW_POLL = {
    "question": "Dinner in the mess today?",
    "poll_date": TODAY.isoformat(),
    "start_time": "16:00",
    "end_time": "19:00",
    "options": ["Yes", "  ", "No"],
}


def test_create_poll_drops_blank_options(client, admin_headers):
    rv = client.post("/api/polls/", json=NEW_POLL, headers=admin_headers)
    poll = rv.get_json()["poll"]

    assert rv.status_code == 201
    assert poll["is_active"] is True
    assert poll["start_time"] == "16:00"
    assert [(o["option_text"], o["sort_order"]) for o in poll["options"]] == [("Yes", 0), ("No", 1)]


def test_create_poll_needs_two_options(client, admin_headers):
    rv = client.post("/api/polls/", json={**NEW_POLL, "options": ["Yes", " "]}, headers=admin_headers)

    assert rv.status_code == 400
    assert "options" in rv.get_json()["error"]["details"]


def test_create_poll_window_must_be_forward(client, admin_headers):
    rv = client.post("/api/polls/", json={**NEW_POLL, "start_time": "19:00", "end_time": "16:00"},
                     headers=admin_headers)

    assert rv.status_code == 400
    assert "end_time" in rv.get_json()["error"]["details"]


def test_update_replaces_options(client, admin_headers):
    poll = add_poll(options=("Yes", "No"))
    old_ids = {o.id for o in poll.options}

    rv = client.put(f"/api/polls/{poll.id}", json={"question": "Lunch?", "options": ["A", "B", "C"]},
                    headers=admin_headers)
    body = rv.get_json()["poll"]

    assert rv.status_code == 200
    assert body["question"] == "Lunch?"
    assert [o["option_text"] for o in body["options"]] == ["A", "B", "C"]
    assert not old_ids & {o.id for o in PollOption.query.all()}
    assert PollOption.query.count() == 3


def test_update_checks_window_against_stored_times(client, admin_headers):
    poll = add_poll(start=time(16, 0), end=time(19, 0))

    rv = client.put(f"/api/polls/{poll.id}", json={"start_time": "20:00"}, headers=admin_headers)

    assert rv.status_code == 400


def test_options_locked_once_voted(client, admin_headers):
    poll = add_poll()
    add_identity()
    register_identity("alice@x.com", "555")
    user = User.query.filter_by(email="alice@x.com").one()
    cast_vote(poll.id, poll.options[0].id, user.id, datetime.combine(TODAY, time(17)))

    rv = client.put(f"/api/polls/{poll.id}", json={"options": ["X", "Y"]}, headers=admin_headers)
    assert rv.status_code == 409
    assert rv.get_json()["error"]["code"] == "POLL_LOCKED"

    # other fields may still change
    rv = client.put(f"/api/polls/{poll.id}", json={"question": "Renamed"}, headers=admin_headers)
    assert rv.status_code == 200


def test_toggle_active(client, admin_headers):
    poll = add_poll()

    rv = client.post(f"/api/polls/{poll.id}/toggle-active", headers=admin_headers)
    assert rv.get_json()["poll"]["is_active"] is False

    rv = client.post(f"/api/polls/{poll.id}/toggle-active", headers=admin_headers)
    assert rv.get_json()["poll"]["is_active"] is True


def test_delete_cascades(client, admin_headers):
    poll = add_poll()
    add_identity()
    register_identity("alice@x.com", "555")
    user = User.query.filter_by(email="alice@x.com").one()
    cast_vote(poll.id, poll.options[0].id, user.id, datetime.combine(TODAY, time(17)))

    rv = client.delete(f"/api/polls/{poll.id}", headers=admin_headers)

    assert rv.status_code == 200
    assert Poll.query.count() == 0
    assert PollOption.query.count() == 0
    assert Vote.query.count() == 0


def test_list_newest_date_first(client, admin_headers):
    add_poll(question="old", day=TODAY.replace(day=1))
    add_poll(question="new", day=TODAY)

    rv = client.get("/api/polls/", headers=admin_headers)

    assert [p["question"] for p in rv.get_json()["polls"]] == ["new", "old"]


def test_missing_poll(client, admin_headers):
    rv = client.get("/api/polls/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert rv.status_code == 404


def test_poll_admin_is_admin_only(client, login_voter):
    add_identity()
    headers = login_voter()

    rv = client.post("/api/polls/", json=NEW_POLL, headers=headers)
    assert rv.status_code == 403
