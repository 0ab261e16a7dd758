import uuid
from typing import Optional, Dict, Any
from flask import request, current_app, has_request_context
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity, get_jwt

from ..extensions import db
from ..models.audit_log import AuditLog


def _optional_actor():
    """
    Returns (user_id, role) or (None, None).
    Works for both authenticated and anonymous requests.
    """
    if not has_request_context():
        return None, None
    try:
        verify_jwt_in_request(optional=True)
        claims = get_jwt()
        return get_jwt_identity(), claims.get("role")
    except Exception:
        return None, None


def audit_log(
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
    actor_user_id: Optional[Any] = None,
    actor_role: Optional[str] = None,
) -> None:
    """Stage an audit row in the current session; the caller commits."""
    user_id, role = _optional_actor()
    if actor_user_id is not None:
        user_id, role = actor_user_id, actor_role

    ip = ua = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        ua = request.headers.get("User-Agent")

    log = AuditLog(
        actor_user_id=_as_uuid(user_id),
        actor_role=role,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else None,
        ip_address=ip,
        user_agent=ua[:255] if ua else None,
        details=details or None,
    )
    db.session.add(log)


def safe_audit(action: str, entity_type: str, entity_id=None, details: dict | None = None) -> None:
    """
    Best-effort audit for read-only endpoints and denied attempts.
    Commits its own row and never breaks the endpoint if auditing fails.
    """
    try:
        audit_log(action=action, entity_type=entity_type, entity_id=entity_id, details=details or {})
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Audit logging failed: %s", action)


def _as_uuid(value):
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
