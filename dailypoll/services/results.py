"""Per-poll tallies and demographic breakdowns for the admin console."""
from dataclasses import dataclass
from datetime import datetime

from ..exceptions import PollNotFound
from ..extensions import db
from ..models.authorized_identity import AuthorizedIdentity
from ..models.poll import Poll
from ..models.profile import UserProfile
from ..models.user import User
from ..models.vote import Vote

HIGHLIGHT_OPTION = "yes"


@dataclass
class VoteDetail:
    voter_name: str
    voter_email: str
    option_text: str
    voted_at: datetime
    gender: str | None
    hostel: str | None
    is_visible: bool = True
    option_id: object = None


def percentage(votes: int, total: int) -> int:
    """votes/total as a whole percent, rounding halves up; 0 when nothing was cast."""
    if total <= 0:
        return 0
    return (votes * 200 + total) // (total * 2)


def _same(a: str | None, b: str | None) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


def count_cohort(details, option_text: str, gender: str, hostel: str | None = None) -> int:
    """How many voters of ``gender`` (and ``hostel``, if given) picked ``option_text``."""
    return sum(
        1
        for d in details
        if _same(d.option_text, option_text)
        and _same(d.gender, gender)
        and (hostel is None or _same(d.hostel, hostel))
    )


def cohort_breakdown(details, option_texts, hostels) -> list[dict]:
    breakdown = []
    for text in option_texts:
        breakdown.append({
            "option_text": text,
            "male": count_cohort(details, text, AuthorizedIdentity.GENDER_MALE),
            "female": count_cohort(details, text, AuthorizedIdentity.GENDER_FEMALE),
            "female_by_hostel": {
                h: count_cohort(details, text, AuthorizedIdentity.GENDER_FEMALE, h) for h in hostels
            },
        })
    return breakdown


def _vote_details(poll: Poll) -> list[VoteDetail]:
    option_text = {o.id: o.option_text for o in poll.options}
    rows = (
        db.session.query(Vote, User.email, UserProfile)
        .outerjoin(User, User.id == Vote.user_id)
        .outerjoin(UserProfile, UserProfile.user_id == Vote.user_id)
        .filter(Vote.poll_id == poll.id)
        .order_by(Vote.voted_at.asc())
        .all()
    )

    details = []
    for vote, email, profile in rows:
        details.append(VoteDetail(
            voter_name=(profile.full_name if profile else None) or email or "Unknown",
            voter_email=email or "",
            option_text=option_text.get(vote.option_id, "Unknown"),
            voted_at=vote.voted_at,
            gender=profile.gender if profile else None,
            hostel=profile.hostel if profile else None,
            is_visible=profile.is_visible if profile else True,
            option_id=vote.option_id,
        ))
    return details


def _known_hostels(details, directory) -> list[str]:
    seen = {}
    for hostel in [i.hostel for i in directory] + [d.hostel for d in details]:
        if hostel and hostel.strip().lower() not in seen:
            seen[hostel.strip().lower()] = hostel.strip()
    return sorted(seen.values(), key=str.lower)


def aggregate_results(poll_id, include_hidden: bool = False) -> dict:
    """Tally a poll and split it by cohort.

    Counts and percentages cover every vote. Identities flagged invisible are
    left out of the voter details, the cohort breakdown and the not-voted list
    unless ``include_hidden`` is set.
    """
    poll = db.session.get(Poll, poll_id)
    if poll is None:
        raise PollNotFound()

    all_details = _vote_details(poll)
    total = len(all_details)

    counts = {}
    for d in all_details:
        counts[d.option_id] = counts.get(d.option_id, 0) + 1

    results = [
        {
            "option_id": o.id,
            "option_text": o.option_text,
            "votes": counts.get(o.id, 0),
            "percentage": percentage(counts.get(o.id, 0), total),
        }
        for o in poll.options
    ]

    directory = AuthorizedIdentity.query.order_by(AuthorizedIdentity.email.asc()).all()
    details = [d for d in all_details if include_hidden or d.is_visible]

    voted_emails = {d.voter_email.lower() for d in all_details if d.voter_email}
    not_voted = [
        {"full_name": i.full_name, "email": i.email, "gender": i.gender, "hostel": i.hostel}
        for i in directory
        if (include_hidden or i.is_visible) and i.email.lower() not in voted_emails
    ]

    option_texts = [o.option_text for o in poll.options]
    breakdown = cohort_breakdown(details, option_texts, _known_hostels(details, directory))
    highlights = next((b for b in breakdown if _same(b["option_text"], HIGHLIGHT_OPTION)), None)

    return {
        "poll_id": poll.id,
        "question": poll.question,
        "poll_date": poll.poll_date,
        "total_votes": total,
        "results": results,
        "details": details,
        "not_voted": not_voted,
        "breakdown": breakdown,
        "highlights": highlights,
    }


VOTED_COLUMNS = ("Name", "Email", "Gender", "Hostel", "Choice", "Voted At")
NOT_VOTED_COLUMNS = ("Name", "Email", "Gender", "Hostel")


def export_rows(aggregate: dict, kind: str) -> tuple[tuple, list[list]]:
    """Header and rows for the voted / not-voted spreadsheet download."""
    if kind == "not_voted":
        rows = [
            [u["full_name"] or "", u["email"], u["gender"] or "-", u["hostel"] or "-"]
            for u in aggregate["not_voted"]
        ]
        return NOT_VOTED_COLUMNS, rows

    rows = [
        [
            d.voter_name,
            d.voter_email,
            d.gender or "-",
            d.hostel or "-",
            d.option_text,
            d.voted_at.strftime("%Y-%m-%d %H:%M:%S"),
        ]
        for d in aggregate["details"]
    ]
    return VOTED_COLUMNS, rows
