import uuid
from datetime import datetime
from sqlalchemy.orm import validates
from ..extensions import db
from ..utils.security import hash_password, verify_password


class User(db.Model):
    """A login identity. Voters are provisioned from the directory on first sign-in."""

    __tablename__ = "users"

    ROLE_ADMIN = "ADMIN"
    ROLE_VOTER = "VOTER"
    VALID_ROLES = (ROLE_ADMIN, ROLE_VOTER)

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(30), nullable=False, default=ROLE_VOTER, index=True)
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    profile = db.relationship(
        "UserProfile",
        backref="user",
        uselist=False,
        lazy=True,
        cascade="all, delete-orphan",
    )

    @validates("role")
    def _check_role(self, key, value):
        if value not in self.VALID_ROLES:
            raise ValueError(f"Unknown role {value!r}")
        return value

    @property
    def is_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    def set_password(self, raw_password: str) -> None:
        self.password_hash = hash_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return verify_password(raw_password, self.password_hash)
