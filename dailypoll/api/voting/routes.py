from flask import Blueprint, request
from flasgger import swag_from
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from ...exceptions import DuplicateVote, VotingClosed
from ...schemas.vote import VoteSubmitSchema, VoterViewSchema
from ...services.voting import (
    MSG_ALREADY_VOTED,
    MSG_RECORDED,
    VoterState,
    VoterView,
    cast_vote,
    evaluate_today,
)
from ...utils.audit import safe_audit
from ...utils.clock import local_now
from ...utils.rbac import current_user_id
from ...utils.validation import validate_or_abort

voting_bp = Blueprint("voting", __name__)
vote_submit_schema = VoteSubmitSchema()
voter_view_schema = VoterViewSchema()


@voting_bp.get("/today")
@jwt_required()
@swag_from({
    "tags": ["Voting"],
    "security": [{"BearerAuth": []}],
    "summary": "Today's poll and what the current voter may do with it",
    "description": (
        "state is one of NO_POLL_TODAY, BEFORE_WINDOW, AFTER_WINDOW, OPEN_UNVOTED, "
        "ALREADY_VOTED. Recomputed on every call."
    ),
    "responses": {200: {"description": "Voter view", "schema": {"$ref": "#/definitions/VoterView"}}},
})
def today():
    view = evaluate_today(current_user_id(), local_now())
    return voter_view_schema.dump(view), 200


@voting_bp.post("/<uuid:poll_id>/vote")
@jwt_required()
@swag_from({
    "tags": ["Voting"],
    "security": [{"BearerAuth": []}],
    "summary": "Cast the current voter's single vote",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {"option_id": {"type": "string", "example": "uuid"}},
            "required": ["option_id"],
        },
    }],
    "responses": {
        200: {"description": "Already voted (treated as success)"},
        201: {"description": "Vote recorded"},
        400: {"description": "Validation error"},
        403: {"description": "Poll not open"},
        404: {"description": "Poll/Option not found"},
        500: {"description": "Server error"},
    },
})
def submit_vote(poll_id):
    payload = validate_or_abort(vote_submit_schema, request.get_json(silent=True) or {})
    user_id = current_user_id()

    try:
        vote = cast_vote(poll_id, payload["option_id"], user_id, local_now())
    except DuplicateVote:
        safe_audit(
            "VOTE_DUPLICATE_ATTEMPT",
            "VOTE",
            details={"poll_id": str(poll_id), "user_id": str(user_id)},
        )
        view = VoterView(VoterState.ALREADY_VOTED, MSG_ALREADY_VOTED)
        return {**voter_view_schema.dump(view), "already_voted": True, "poll_id": str(poll_id)}, 200
    except VotingClosed as e:
        safe_audit(
            "VOTE_SUBMIT_DENIED",
            "VOTE",
            details={"poll_id": str(poll_id), "state": str(e.state)},
        )
        return {"state": str(e.state), "message": e.message}, 403
    except SQLAlchemyError:
        return {"message": "Failed to record vote"}, 500

    return {
        "state": str(VoterState.ALREADY_VOTED),
        "message": MSG_RECORDED,
        "already_voted": False,
        "vote_id": str(vote.id),
        "poll_id": str(vote.poll_id),
        "option_id": str(vote.option_id),
    }, 201
