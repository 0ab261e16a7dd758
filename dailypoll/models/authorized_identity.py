import uuid
from datetime import datetime
from ..extensions import db


class AuthorizedIdentity(db.Model):
    """Directory entry for a pre-approved voter.

    The phone number doubles as the bootstrap password: the first successful
    sign-in with (email, phone) provisions the login identity.
    """

    __tablename__ = "authorized_emails"

    GENDER_MALE = "male"
    GENDER_FEMALE = "female"
    VALID_GENDERS = (GENDER_MALE, GENDER_FEMALE)

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    # Always stored lower-cased, which makes the unique index case-insensitive
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    phone = db.Column(db.String(32), nullable=False)

    full_name = db.Column(db.String(200), nullable=True)
    gender = db.Column(db.String(10), nullable=False, default=GENDER_MALE)
    hostel = db.Column(db.String(100), nullable=True)

    is_registered = db.Column(db.Boolean, nullable=False, default=False)
    is_visible = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    @classmethod
    def clean_hostel(cls, gender: str, hostel: str | None) -> str | None:
        # Hostel only means something for female residents
        if gender != cls.GENDER_FEMALE:
            return None
        return (hostel or "").strip() or None

    @classmethod
    def find_by_email(cls, email: str) -> "AuthorizedIdentity | None":
        return cls.query.filter_by(email=cls.normalize_email(email)).first()
