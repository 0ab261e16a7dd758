from datetime import datetime, time

import pytest

from dailypoll.exceptions import DuplicateVote, OptionNotFound, VotingClosed
from dailypoll.models import Vote
from dailypoll.services.registration import register_identity
from dailypoll.services.voting import (
    MSG_CLOSED,
    MSG_NO_POLL,
    VoterState,
    cast_vote,
    evaluate_today,
    window_state,
)
from dailypoll.models import User

from conftest import TODAY, add_identity, add_poll


def _at(hour, minute=0, second=0, day=TODAY):
    return datetime.combine(day, time(hour, minute, second))


@pytest.fixture
def voter(app):
    add_identity(email="alice@x.com", phone="555")
    register_identity("alice@x.com", "555")
    return User.query.filter_by(email="alice@x.com").one()


@pytest.mark.parametrize("now_minutes, expected", [
    (959, VoterState.BEFORE_WINDOW),
    (960, None),
    (1139, None),
    (1140, VoterState.AFTER_WINDOW),
    (1200, VoterState.AFTER_WINDOW),
])
def test_window_boundaries(now_minutes, expected):
    # 16:00 == 960, 19:00 == 1140
    assert window_state(960, 1140, now_minutes) is expected


def test_no_poll_today(voter):
    add_poll(day=TODAY.replace(day=16))

    view = evaluate_today(voter.id, _at(17))

    assert view.state is VoterState.NO_POLL_TODAY
    assert view.message == MSG_NO_POLL
    assert view.poll is None


def test_inactive_poll_is_not_todays_poll(voter):
    add_poll(is_active=False)
    assert evaluate_today(voter.id, _at(17)).state is VoterState.NO_POLL_TODAY


def test_before_window_reports_countdown(voter):
    add_poll(start=time(16, 0), end=time(19, 0))

    view = evaluate_today(voter.id, _at(15, 0))

    assert view.state is VoterState.BEFORE_WINDOW
    assert view.message == "The poll opens in 1h 0m. Come back at 16:00."


def test_countdown_drops_hours_under_an_hour(voter):
    add_poll(start=time(16, 0), end=time(19, 0))

    view = evaluate_today(voter.id, _at(15, 35))

    assert view.message == "The poll opens in 25m. Come back at 16:00."


def test_closed_exactly_at_end(voter):
    add_poll(start=time(16, 0), end=time(19, 0))

    view = evaluate_today(voter.id, _at(19, 0))

    assert view.state is VoterState.AFTER_WINDOW
    assert view.message == MSG_CLOSED
    assert "closed" in view.message


def test_open_exactly_at_start(voter):
    add_poll(start=time(16, 0), end=time(19, 0))

    view = evaluate_today(voter.id, _at(16, 0))

    assert view.state is VoterState.OPEN_UNVOTED
    assert [o.option_text for o in view.poll.options] == ["Yes", "No"]


def test_seconds_are_ignored(voter):
    add_poll(start=time(16, 0), end=time(19, 0))
    assert evaluate_today(voter.id, _at(18, 59, 59)).state is VoterState.OPEN_UNVOTED


def test_vote_moves_voter_to_already_voted(voter):
    poll = add_poll()
    yes = poll.options[0]

    cast_vote(poll.id, yes.id, voter.id, _at(17))
    view = evaluate_today(voter.id, _at(17, 30))

    assert view.state is VoterState.ALREADY_VOTED
    assert view.selected_option_id == yes.id


def test_second_vote_never_adds_a_row(voter):
    poll = add_poll()
    yes, no = poll.options

    cast_vote(poll.id, yes.id, voter.id, _at(17))
    with pytest.raises(DuplicateVote):
        cast_vote(poll.id, no.id, voter.id, _at(17, 1))

    votes = Vote.query.filter_by(poll_id=poll.id, user_id=voter.id).all()
    assert len(votes) == 1
    assert votes[0].option_id == yes.id


def test_vote_outside_window_is_refused(voter):
    poll = add_poll()

    with pytest.raises(VotingClosed) as exc:
        cast_vote(poll.id, poll.options[0].id, voter.id, _at(19, 0))

    assert exc.value.state is VoterState.AFTER_WINDOW
    assert Vote.query.count() == 0


def test_vote_on_another_days_poll_is_refused(voter):
    poll = add_poll(day=TODAY.replace(day=16))

    with pytest.raises(VotingClosed) as exc:
        cast_vote(poll.id, poll.options[0].id, voter.id, _at(17))

    assert exc.value.state is VoterState.NO_POLL_TODAY


def test_option_must_belong_to_poll(voter):
    poll = add_poll()
    other = add_poll(question="Another?", options=("A", "B"))

    with pytest.raises(OptionNotFound):
        cast_vote(poll.id, other.options[0].id, voter.id, _at(17))


def test_vote_is_stamped_with_poll_local_time(voter):
    poll = add_poll()

    vote = cast_vote(poll.id, poll.options[0].id, voter.id, _at(17, 42, 5))

    assert vote.id == Vote.find(poll.id, voter.id).id
    assert Vote.find(poll.id, voter.id).voted_at == _at(17, 42, 5)


def test_only_the_poll_shown_today_takes_votes(voter):
    shown = add_poll(question="First?")
    hidden = add_poll(question="Second?")

    assert evaluate_today(voter.id, _at(17)).poll.id == shown.id
    with pytest.raises(VotingClosed) as exc:
        cast_vote(hidden.id, hidden.options[0].id, voter.id, _at(17))

    assert exc.value.state is VoterState.NO_POLL_TODAY
    assert Vote.query.count() == 0
