from flask import Blueprint, request, current_app
from flasgger import swag_from
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt,
    get_jwt_identity,
    jwt_required,
)
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ...exceptions import (
    AdminAlreadyExists,
    AlreadyRegistered,
    DailyPollError,
    NotAuthorized,
    ProvisioningError,
)
from ...extensions import db
from ...models.token_blocklist import TokenBlocklist
from ...models.user import User
from ...schemas.auth import LoginSchema, RegisterUserSchema, SetupAdminSchema
from ...schemas.user import UserSchema
from ...services.registration import register_identity, setup_admin, sign_in
from ...utils.audit import audit_log, safe_audit
from ...utils.rbac import current_user_id
from ...utils.validation import validate_or_abort

auth_bp = Blueprint("auth", __name__)

register_user_schema = RegisterUserSchema()
setup_admin_schema = SetupAdminSchema()
login_schema = LoginSchema()
user_schema = UserSchema()

WRONG_PASSWORD = "Wrong password. Please enter your registered phone number as password."


def _error(message: str, status: int, **extra):
    return {"error": message, **extra}, status


def _load_or_error(schema, payload):
    """Bootstrap endpoints answer with a flat {error} body instead of the envelope."""
    try:
        return schema.load(payload), None
    except ValidationError as err:
        fields = ", ".join(sorted(err.messages))
        return None, _error(f"Invalid or missing fields: {fields}", 400)


def _tokens_for(user: User) -> dict:
    claims = {"role": user.role}
    return {
        "access_token": create_access_token(identity=str(user.id), additional_claims=claims),
        "refresh_token": create_refresh_token(identity=str(user.id), additional_claims=claims),
        "token_type": "bearer",
    }


@auth_bp.post("/register-user")
@swag_from({
    "tags": ["Auth"],
    "summary": "Provision a voter account from the directory",
    "description": (
        "Creates the login identity for a pre-approved email. The password is the "
        "phone number stored in the directory. The caller signs in afterwards."
    ),
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "email": {"type": "string", "example": "alice@example.com"},
                "phone": {"type": "string", "example": "9876543210"},
            },
            "required": ["email", "phone"],
        },
    }],
    "responses": {
        200: {"description": "Account provisioned"},
        400: {"description": "Already registered / provisioning error"},
        403: {"description": "Email not authorized"},
        500: {"description": "Server error"},
    },
})
def register_user():
    data, error = _load_or_error(register_user_schema, request.get_json(silent=True) or {})
    if error:
        return error

    try:
        register_identity(data["email"], data["phone"])
    except NotAuthorized as e:
        safe_audit("REGISTER_DENIED_NOT_AUTHORIZED", "AUTH", details={"email": data["email"]})
        return _error(e.message, 403)
    except AlreadyRegistered as e:
        return _error(e.message, 400, already_registered=True)
    except ProvisioningError as e:
        return _error(e.message, 400)
    except SQLAlchemyError:
        return _error("Failed to register user", 500)

    return {"success": True}, 200


@auth_bp.post("/setup-admin")
@swag_from({
    "tags": ["Auth"],
    "summary": "Bootstrap the single admin account",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "email": {"type": "string", "example": "admin@example.com"},
                "password": {"type": "string", "example": "StrongPass123"},
            },
            "required": ["email", "password"],
        },
    }],
    "responses": {
        200: {"description": "Admin created"},
        400: {"description": "Admin already exists / provisioning error"},
        500: {"description": "Server error"},
    },
})
def bootstrap_admin():
    data, error = _load_or_error(setup_admin_schema, request.get_json(silent=True) or {})
    if error:
        return error

    try:
        setup_admin(data["email"], data["password"])
    except (AdminAlreadyExists, ProvisioningError) as e:
        return _error(e.message, 400)
    except SQLAlchemyError:
        return _error("Failed to create admin", 500)

    return {"success": True}, 200


@auth_bp.post("/login")
@swag_from({
    "tags": ["Auth"],
    "summary": "Sign in (voters are registered on their first sign-in)",
    "description": (
        "Voters use their phone number as password. If the credentials do not match "
        "an account, the directory is consulted and the account provisioned."
    ),
    "responses": {
        200: {"description": "Tokens, user and post-login redirect"},
        400: {"description": "Validation error"},
        401: {"description": "Invalid credentials / wrong password"},
        403: {"description": "Email not authorized / inactive account"},
    },
})
def login():
    payload = validate_or_abort(login_schema, request.get_json(silent=True) or {})
    email = payload["email"].strip().lower()

    try:
        user = sign_in(email, payload["password"])
    except NotAuthorized:
        safe_audit("LOGIN_DENIED_NOT_AUTHORIZED", "AUTH", details={"email": email})
        return {"message": "Access denied. Email not authorized."}, 403
    except AlreadyRegistered:
        safe_audit("LOGIN_FAILED_WRONG_PASSWORD", "AUTH", details={"email": email})
        return {"message": WRONG_PASSWORD}, 401
    except DailyPollError as e:
        safe_audit("LOGIN_FAILED", "AUTH", details={"email": email, "reason": e.code})
        return {"message": e.message}, e.status_code
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error during login")
        return {"message": "Authentication service error. Please try again."}, 500

    tokens = _tokens_for(user)
    audit_log(
        action="LOGIN_SUCCESS",
        entity_type="AUTH",
        entity_id=user.id,
        details={"email": user.email, "role": user.role},
        actor_user_id=user.id,
        actor_role=user.role,
    )
    db.session.commit()

    return {
        "message": "Login successful",
        **tokens,
        "user": {"id": str(user.id), "email": user.email, "role": user.role},
        "is_admin": user.is_admin,
        "redirect": "/admin" if user.is_admin else "/dashboard",
    }, 200


@auth_bp.post("/refresh")
@jwt_required(refresh=True)
@swag_from({
    "tags": ["Auth"],
    "security": [{"BearerAuth": []}],
    "summary": "Refresh access token (requires refresh token)",
    "responses": {200: {"description": "New access token issued"}, 401: {"description": "Unauthorized"}},
})
def refresh():
    user = db.session.get(User, current_user_id())
    if not user or not user.is_active:
        return {"message": "User inactive or not found"}, 401

    access = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return {"access_token": access}, 200


@auth_bp.get("/me")
@jwt_required()
@swag_from({
    "tags": ["Auth"],
    "security": [{"BearerAuth": []}],
    "summary": "Current user, profile and role check",
    "responses": {200: {"description": "User profile"}, 401: {"description": "Unauthorized"}, 404: {"description": "User not found"}},
})
def me():
    user = db.session.get(User, current_user_id())
    if not user:
        return {"message": "User not found"}, 404

    return {"user": user_schema.dump(user), "is_admin": user.is_admin}, 200


def _revoke_current(token_type: str, action: str):
    jti = (get_jwt() or {}).get("jti")
    if not jti:
        return {"message": "Invalid token"}, 400

    try:
        TokenBlocklist.revoke(jti, token_type)
        audit_log(action=action, entity_type="AUTH", details={"user_id": str(get_jwt_identity())})
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error during logout")
        return {"message": "Logout failed"}, 500
    return None


@auth_bp.post("/logout")
@jwt_required()
@swag_from({
    "tags": ["Auth"],
    "security": [{"BearerAuth": []}],
    "summary": "Logout (revoke access token)",
    "responses": {200: {"description": "Logged out"}, 401: {"description": "Unauthorized"}},
})
def logout():
    failed = _revoke_current("access", "LOGOUT_ACCESS")
    if failed:
        return failed
    return {"message": "Logged out successfully"}, 200


@auth_bp.post("/logout/refresh")
@jwt_required(refresh=True)
def logout_refresh():
    failed = _revoke_current("refresh", "LOGOUT_REFRESH")
    if failed:
        return failed
    return {"message": "Refresh token revoked"}, 200
