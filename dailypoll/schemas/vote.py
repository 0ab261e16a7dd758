from marshmallow import Schema, fields

from .poll import PollReadSchema


class VoteSubmitSchema(Schema):
    option_id = fields.UUID(required=True)


class VoterViewSchema(Schema):
    state = fields.Str(required=True)
    message = fields.Str(allow_none=True)
    poll = fields.Nested(PollReadSchema, allow_none=True)
    selected_option_id = fields.UUID(allow_none=True)
    can_vote = fields.Bool(dump_only=True)
