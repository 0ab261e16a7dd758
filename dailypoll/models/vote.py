import uuid
from datetime import datetime
from ..extensions import db


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    poll_id = db.Column(db.Uuid, db.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = db.Column(db.Uuid, db.ForeignKey("poll_options.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Uuid, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Poll-local wall-clock time (POLL_TIMEZONE), set by cast_vote
    voted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    option = db.relationship("PollOption", lazy="joined")

    __table_args__ = (
        # The ledger holds at most one vote per user per poll
        db.UniqueConstraint("poll_id", "user_id", name="uq_votes_poll_user"),
    )

    @classmethod
    def find(cls, poll_id, user_id) -> "Vote | None":
        return cls.query.filter_by(poll_id=poll_id, user_id=user_id).first()
