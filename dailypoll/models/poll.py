import uuid
from datetime import datetime, date, time
from ..extensions import db
from .vote import Vote


def minutes_of_day(value: time | datetime) -> int:
    return value.hour * 60 + value.minute


class Poll(db.Model):
    __tablename__ = "polls"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    question = db.Column(db.Text, nullable=False)
    poll_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    options = db.relationship(
        "PollOption",
        backref="poll",
        lazy=True,
        order_by="PollOption.sort_order",
        cascade="all, delete-orphan",
    )
    votes = db.relationship(
        "Vote",
        backref="poll",
        lazy=True,
        cascade="all, delete-orphan",
    )

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of_day(self.end_time)

    def has_votes(self) -> bool:
        return db.session.query(Vote.id).filter_by(poll_id=self.id).first() is not None

    def toggle_active(self) -> bool:
        self.is_active = not self.is_active
        return self.is_active

    @classmethod
    def for_day(cls, day: date) -> "Poll | None":
        """Today's poll: active and dated ``day``. Earliest created wins if several qualify."""
        return (
            cls.query
            .filter(cls.poll_date == day, cls.is_active.is_(True))
            .order_by(cls.created_at.asc())
            .first()
        )
