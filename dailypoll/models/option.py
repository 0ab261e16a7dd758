import uuid
from ..extensions import db


class PollOption(db.Model):
    __tablename__ = "poll_options"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    poll_id = db.Column(db.Uuid, db.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)

    option_text = db.Column(db.String(200), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
