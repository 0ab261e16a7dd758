"""First-login registration and account bootstrap.

A voter never picks a password: the directory stores their phone number and
the first sign-in with (email, phone) provisions the login identity. The
admin console has a single bootstrap admin created through ``setup_admin``.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..exceptions import (
    AdminAlreadyExists,
    AlreadyRegistered,
    InactiveAccount,
    InvalidCredentials,
    NotAuthorized,
    ProvisioningError,
)
from ..extensions import db
from ..models.authorized_identity import AuthorizedIdentity
from ..models.profile import UserProfile
from ..models.user import User
from ..utils.audit import audit_log


def register_identity(email: str, phone: str) -> None:
    """Provision a login identity for a directory entry.

    ``phone`` is what the caller typed; the password set on the new account is
    the phone number stored in the directory. Raises ``NotAuthorized`` for
    unknown emails and ``AlreadyRegistered`` when the entry was already used.
    """
    identity = AuthorizedIdentity.find_by_email(email)
    if identity is None:
        raise NotAuthorized()
    if identity.is_registered:
        raise AlreadyRegistered()
    if not (identity.phone or "").strip():
        raise ProvisioningError("Directory entry has no phone number to use as password")

    try:
        # Claim the entry first: only one concurrent first-login can flip the flag
        claimed = (
            db.session.query(AuthorizedIdentity)
            .filter(
                AuthorizedIdentity.id == identity.id,
                AuthorizedIdentity.is_registered.is_(False),
            )
            .update({AuthorizedIdentity.is_registered: True}, synchronize_session=False)
        )
        if claimed != 1:
            db.session.rollback()
            raise AlreadyRegistered()

        user = User(
            email=identity.email,
            role=User.ROLE_VOTER,
            email_verified=True,
        )
        user.set_password(identity.phone)
        user.profile = UserProfile(
            full_name=identity.full_name,
            phone=identity.phone,
            gender=identity.gender,
            hostel=identity.hostel,
            is_visible=identity.is_visible,
        )
        db.session.add(user)
        db.session.flush()

        audit_log(
            action="IDENTITY_REGISTERED",
            entity_type="AUTH",
            entity_id=user.id,
            details={"email": user.email},
            actor_user_id=user.id,
            actor_role=user.role,
        )
        db.session.commit()

    except IntegrityError:
        # users.email already taken: somebody provisioned this address first
        db.session.rollback()
        current_app.logger.info("Registration conflict for %s", identity.email)
        raise AlreadyRegistered()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error during registration")
        raise

    current_app.logger.info("Provisioned voter account for %s", identity.email)


def setup_admin(email: str, password: str) -> User:
    """Create the one and only admin. Refuses once any admin exists."""
    if db.session.query(User.id).filter_by(role=User.ROLE_ADMIN).first() is not None:
        raise AdminAlreadyExists()

    email = AuthorizedIdentity.normalize_email(email)
    if User.query.filter_by(email=email).first():
        raise ProvisioningError("A user with this email address has already been registered")

    user = User(email=email, role=User.ROLE_ADMIN, email_verified=True)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.flush()
        audit_log(
            action="ADMIN_BOOTSTRAPPED",
            entity_type="AUTH",
            entity_id=user.id,
            details={"email": user.email},
            actor_user_id=user.id,
            actor_role=user.role,
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ProvisioningError("A user with this email address has already been registered")
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error during admin setup")
        raise

    current_app.logger.info("Bootstrapped admin account %s", user.email)
    return user


def authenticate(email: str, password: str) -> User | None:
    user = User.query.filter_by(email=AuthorizedIdentity.normalize_email(email)).first()
    if user is None or not user.check_password(password):
        return None
    return user


def sign_in(email: str, password: str) -> User:
    """Sign in, registering the directory entry on the first attempt.

    A failed credential check falls through to ``register_identity`` with the
    password treated as the phone number, then signs in once more.
    """
    user = authenticate(email, password)
    if user is None:
        register_identity(email, password)
        user = authenticate(email, password)
        if user is None:
            raise InvalidCredentials()

    if not user.is_active:
        raise InactiveAccount()
    return user
