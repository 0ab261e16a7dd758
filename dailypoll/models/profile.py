from ..extensions import db


class UserProfile(db.Model):
    __tablename__ = "profiles"

    user_id = db.Column(db.Uuid, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    # Snapshot of the directory entry taken at registration time
    full_name = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    gender = db.Column(db.String(10), nullable=True)
    hostel = db.Column(db.String(100), nullable=True)
    is_visible = db.Column(db.Boolean, nullable=False, default=True)
