"""Voter-facing state machine for today's poll.

The state is derived from scratch on every request from three inputs: the
poll dated today, the wall-clock time, and the vote ledger. Nothing about a
voter's progress is stored anywhere else.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..exceptions import DuplicateVote, OptionNotFound, PollNotFound, VotingClosed
from ..extensions import db
from ..models.option import PollOption
from ..models.poll import Poll, minutes_of_day
from ..models.vote import Vote
from ..utils.audit import audit_log

MSG_NO_POLL = "No poll available today. Check back later!"
MSG_CLOSED = "Today's poll has closed. See you tomorrow!"
MSG_OPEN = "Select one option and submit your vote"
MSG_RECORDED = "Your vote has been recorded successfully."
MSG_ALREADY_VOTED = "You've already cast your vote today."


class VoterState(str, Enum):
    NO_POLL_TODAY = "NO_POLL_TODAY"
    BEFORE_WINDOW = "BEFORE_WINDOW"
    AFTER_WINDOW = "AFTER_WINDOW"
    OPEN_UNVOTED = "OPEN_UNVOTED"
    ALREADY_VOTED = "ALREADY_VOTED"

    def __str__(self) -> str:
        return self.value


@dataclass
class VoterView:
    state: VoterState
    message: str | None = None
    poll: Poll | None = None
    selected_option_id: object = None

    @property
    def can_vote(self) -> bool:
        return self.state is VoterState.OPEN_UNVOTED


def window_state(start_minutes: int, end_minutes: int, now_minutes: int) -> VoterState | None:
    """Place ``now`` against the [start, end) window. None means the window is open."""
    if now_minutes < start_minutes:
        return VoterState.BEFORE_WINDOW
    if now_minutes >= end_minutes:
        return VoterState.AFTER_WINDOW
    return None


def opens_in_message(poll: Poll, now: datetime) -> str:
    diff = poll.start_minutes - minutes_of_day(now)
    hours, mins = divmod(diff, 60)
    countdown = f"{hours}h {mins}m" if hours > 0 else f"{mins}m"
    return f"The poll opens in {countdown}. Come back at {poll.start_time.strftime('%H:%M')}."


def _closed_view(poll: Poll, now: datetime) -> VoterView | None:
    state = window_state(poll.start_minutes, poll.end_minutes, minutes_of_day(now))
    if state is VoterState.BEFORE_WINDOW:
        return VoterView(state, opens_in_message(poll, now), poll)
    if state is VoterState.AFTER_WINDOW:
        return VoterView(state, MSG_CLOSED, poll)
    return None


def evaluate_poll(poll: Poll, user_id, now: datetime) -> VoterView:
    closed = _closed_view(poll, now)
    if closed is not None:
        return closed

    vote = Vote.find(poll.id, user_id)
    if vote is not None:
        return VoterView(VoterState.ALREADY_VOTED, MSG_RECORDED, poll, vote.option_id)
    return VoterView(VoterState.OPEN_UNVOTED, MSG_OPEN, poll)


def evaluate_today(user_id, now: datetime) -> VoterView:
    poll = Poll.for_day(now.date())
    if poll is None:
        return VoterView(VoterState.NO_POLL_TODAY, MSG_NO_POLL)
    return evaluate_poll(poll, user_id, now)


def cast_vote(poll_id, option_id, user_id, now: datetime) -> Vote:
    """Record ``user_id``'s choice, stamped with ``now``.

    ``now`` is poll-local wall-clock time, the same clock the window is checked
    against. Raises ``DuplicateVote`` if the ledger already has one.
    """
    poll = db.session.get(Poll, poll_id)
    if poll is None:
        raise PollNotFound()

    # Only the poll evaluate_today shows may take votes
    todays = Poll.for_day(now.date())
    if todays is None or todays.id != poll.id:
        raise VotingClosed(VoterState.NO_POLL_TODAY, "This poll is not open today")

    closed = _closed_view(poll, now)
    if closed is not None:
        raise VotingClosed(closed.state, closed.message)

    option = PollOption.query.filter_by(id=option_id, poll_id=poll.id).first()
    if option is None:
        raise OptionNotFound()

    vote = Vote(poll_id=poll.id, option_id=option.id, user_id=user_id, voted_at=now)
    try:
        db.session.add(vote)
        db.session.flush()
        audit_log(
            action="VOTE_SUBMITTED",
            entity_type="VOTE",
            entity_id=vote.id,
            details={"poll_id": str(poll.id), "option_id": str(option.id)},
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if Vote.find(poll_id, user_id) is not None:
            current_app.logger.info("Duplicate vote attempt poll=%s user=%s", poll_id, user_id)
            raise DuplicateVote()
        current_app.logger.exception("Vote insert violated a constraint")
        raise
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error while submitting vote")
        raise

    return vote
