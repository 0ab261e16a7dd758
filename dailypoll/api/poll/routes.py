from flask import Blueprint, request, current_app, abort
from flasgger import swag_from
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from ...exceptions import PollLocked, PollNotFound
from ...extensions import db
from ...models.option import PollOption
from ...models.poll import Poll
from ...schemas.poll import PollCreateSchema, PollUpdateSchema, PollReadSchema
from ...utils.audit import audit_log
from ...utils.rbac import admin_required
from ...utils.validation import validate_or_abort

polls_bp = Blueprint("polls", __name__)

poll_create_schema = PollCreateSchema()
poll_update_schema = PollUpdateSchema()
poll_read_schema = PollReadSchema()
poll_read_many_schema = PollReadSchema(many=True)


def _get_poll_or_404(poll_id) -> Poll:
    poll = db.session.get(Poll, poll_id)
    if poll is None:
        raise PollNotFound()
    return poll


def _replace_options(poll: Poll, texts: list[str]) -> None:
    """Delete every option and insert ``texts`` in order; option ids do not survive."""
    poll.options.clear()
    db.session.flush()
    for i, text in enumerate(texts):
        poll.options.append(PollOption(option_text=text, sort_order=i))


@polls_bp.post("/")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Create a daily poll (admin)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "question": {"type": "string", "example": "Will you eat dinner in the mess today?"},
                "poll_date": {"type": "string", "example": "2026-10-17"},
                "start_time": {"type": "string", "example": "16:00"},
                "end_time": {"type": "string", "example": "19:00"},
                "options": {"type": "array", "items": {"type": "string"}, "example": ["Yes", "No"]},
            },
            "required": ["question", "poll_date", "start_time", "end_time", "options"],
        },
    }],
    "responses": {201: {"description": "Created"}, 400: {"description": "Validation error"}, 403: {"description": "Forbidden"}},
})
def create_poll():
    payload = validate_or_abort(poll_create_schema, request.get_json(silent=True) or {})

    poll = Poll(
        question=payload["question"],
        poll_date=payload["poll_date"],
        start_time=payload["start_time"],
        end_time=payload["end_time"],
        is_active=payload["is_active"],
    )

    try:
        db.session.add(poll)
        db.session.flush()
        _replace_options(poll, payload["options"])

        audit_log(
            action="POLL_CREATED",
            entity_type="POLL",
            entity_id=poll.id,
            details={"question": poll.question, "poll_date": poll.poll_date.isoformat()},
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error creating poll")
        return {"message": "Failed to create poll"}, 500

    return {"poll": poll_read_schema.dump(poll)}, 201


@polls_bp.get("/")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "List polls, newest poll date first (admin)",
    "responses": {200: {"description": "OK"}, 403: {"description": "Forbidden"}},
})
def list_polls():
    polls = Poll.query.order_by(Poll.poll_date.desc(), Poll.created_at.desc()).all()
    return {"polls": poll_read_many_schema.dump(polls)}, 200


@polls_bp.get("/<uuid:poll_id>")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Get poll details (admin)",
    "responses": {200: {"description": "OK"}, 404: {"description": "Poll not found"}},
})
def get_poll(poll_id):
    poll = _get_poll_or_404(poll_id)
    return {"poll": poll_read_schema.dump(poll)}, 200


@polls_bp.put("/<uuid:poll_id>")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Update a poll (admin)",
    "description": "Options are replaced as a batch; refused once the poll has votes.",
    "responses": {
        200: {"description": "Updated"},
        400: {"description": "Validation error"},
        404: {"description": "Poll not found"},
        409: {"description": "Options locked by existing votes"},
    },
})
def update_poll(poll_id):
    poll = _get_poll_or_404(poll_id)
    payload = validate_or_abort(poll_update_schema, request.get_json(silent=True) or {})

    start = payload.get("start_time", poll.start_time)
    end = payload.get("end_time", poll.end_time)
    if start >= end:
        abort(400, description={
            "code": "VALIDATION_ERROR",
            "message": "Validation error",
            "errors": {"end_time": ["end_time must be after start_time"]},
        })

    if "options" in payload and poll.has_votes():
        raise PollLocked()

    try:
        for field in ("question", "poll_date", "start_time", "end_time", "is_active"):
            if field in payload:
                setattr(poll, field, payload[field])

        if "options" in payload:
            _replace_options(poll, payload["options"])

        audit_log(
            action="POLL_UPDATED",
            entity_type="POLL",
            entity_id=poll.id,
            details={"updated_fields": sorted(payload.keys())},
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error updating poll")
        return {"message": "Failed to update poll"}, 500

    return {"poll": poll_read_schema.dump(poll)}, 200


@polls_bp.post("/<uuid:poll_id>/toggle-active")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Flip the active flag (admin)",
    "responses": {200: {"description": "OK"}, 404: {"description": "Poll not found"}},
})
def toggle_active(poll_id):
    poll = _get_poll_or_404(poll_id)

    try:
        is_active = poll.toggle_active()
        audit_log(
            action="POLL_ACTIVATED" if is_active else "POLL_DEACTIVATED",
            entity_type="POLL",
            entity_id=poll.id,
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error toggling poll")
        return {"message": "Failed to update poll"}, 500

    return {"poll": poll_read_schema.dump(poll)}, 200


@polls_bp.delete("/<uuid:poll_id>")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Polls"],
    "security": [{"BearerAuth": []}],
    "summary": "Delete a poll with its options and votes (admin)",
    "responses": {200: {"description": "Deleted"}, 404: {"description": "Poll not found"}},
})
def delete_poll(poll_id):
    poll = _get_poll_or_404(poll_id)

    try:
        audit_log(
            action="POLL_DELETED",
            entity_type="POLL",
            entity_id=poll.id,
            details={"question": poll.question},
        )
        db.session.delete(poll)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error deleting poll")
        return {"message": "Failed to delete poll"}, 500

    return {"message": "Poll deleted"}, 200
