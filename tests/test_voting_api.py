from dailypoll.models import Vote

from conftest import add_identity, add_poll


def test_today_without_poll(client, login_voter, at):
    add_identity()
    headers = login_voter()
    at(12)

    rv = client.get("/api/polls/today", headers=headers)

    assert rv.status_code == 200
    assert rv.get_json()["state"] == "NO_POLL_TODAY"
    assert rv.get_json()["poll"] is None


def test_today_before_window(client, login_voter, at):
    add_identity()
    add_poll()
    headers = login_voter()
    at(15, 0)

    body = client.get("/api/polls/today", headers=headers).get_json()

    assert body["state"] == "BEFORE_WINDOW"
    assert "opens in 1h 0m" in body["message"]
    assert body["poll"]["start_time"] == "16:00"


def test_vote_flow(client, login_voter, at):
    add_identity()
    poll = add_poll()
    yes_id = str(poll.options[0].id)
    headers = login_voter()
    at(17)

    body = client.get("/api/polls/today", headers=headers).get_json()
    assert body["state"] == "OPEN_UNVOTED"
    assert body["can_vote"] is True
    assert [o["option_text"] for o in body["poll"]["options"]] == ["Yes", "No"]

    rv = client.post(f"/api/polls/{poll.id}/vote", json={"option_id": yes_id}, headers=headers)
    assert rv.status_code == 201
    assert rv.get_json()["state"] == "ALREADY_VOTED"

    body = client.get("/api/polls/today", headers=headers).get_json()
    assert body["state"] == "ALREADY_VOTED"
    assert body["can_vote"] is False
    assert body["selected_option_id"] == yes_id


def test_duplicate_vote_is_success_equivalent(client, login_voter, at):
    add_identity()
    poll = add_poll()
    headers = login_voter()
    at(17)

    first = client.post(f"/api/polls/{poll.id}/vote", json={"option_id": str(poll.options[0].id)}, headers=headers)
    second = client.post(f"/api/polls/{poll.id}/vote", json={"option_id": str(poll.options[1].id)}, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    body = second.get_json()
    assert body["state"] == "ALREADY_VOTED"
    assert body["already_voted"] is True
    assert body["message"] == "You've already cast your vote today."
    assert Vote.query.filter_by(poll_id=poll.id).count() == 1


def test_vote_after_close_is_forbidden(client, login_voter, at):
    add_identity()
    poll = add_poll()
    headers = login_voter()
    at(19, 0)

    rv = client.post(f"/api/polls/{poll.id}/vote", json={"option_id": str(poll.options[0].id)}, headers=headers)

    assert rv.status_code == 403
    assert rv.get_json()["state"] == "AFTER_WINDOW"
    assert Vote.query.count() == 0


def test_vote_requires_option(client, login_voter, at):
    add_identity()
    poll = add_poll()
    headers = login_voter()
    at(17)

    rv = client.post(f"/api/polls/{poll.id}/vote", json={}, headers=headers)

    assert rv.status_code == 400
    assert rv.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_vote_with_foreign_option(client, login_voter, at):
    add_identity()
    poll = add_poll()
    other = add_poll(question="Other?")
    headers = login_voter()
    at(17)

    rv = client.post(f"/api/polls/{poll.id}/vote", json={"option_id": str(other.options[0].id)}, headers=headers)

    assert rv.status_code == 404
    assert rv.get_json()["error"]["code"] == "OPTION_NOT_FOUND"


def test_voting_needs_a_token(client):
    rv = client.get("/api/polls/today")
    assert rv.status_code == 401
