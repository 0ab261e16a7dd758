from marshmallow import Schema, fields


class OptionResultSchema(Schema):
    option_id = fields.UUID(required=True)
    option_text = fields.Str(required=True)
    votes = fields.Int(required=True)
    percentage = fields.Int(required=True)


class VoteDetailSchema(Schema):
    voter_name = fields.Str()
    voter_email = fields.Str()
    option_text = fields.Str()
    voted_at = fields.DateTime()
    gender = fields.Str()
    hostel = fields.Str(allow_none=True)


class NotVotedSchema(Schema):
    full_name = fields.Str(allow_none=True)
    email = fields.Str()
    gender = fields.Str()
    hostel = fields.Str(allow_none=True)


class CohortBreakdownSchema(Schema):
    option_text = fields.Str()
    male = fields.Int()
    female = fields.Int()
    female_by_hostel = fields.Dict(keys=fields.Str(), values=fields.Int())


class PollResultsSchema(Schema):
    poll_id = fields.UUID(required=True)
    question = fields.Str(required=True)
    poll_date = fields.Date()
    total_votes = fields.Int(required=True)
    results = fields.List(fields.Nested(OptionResultSchema), required=True)
    details = fields.List(fields.Nested(VoteDetailSchema))
    not_voted = fields.List(fields.Nested(NotVotedSchema))
    breakdown = fields.List(fields.Nested(CohortBreakdownSchema))
    highlights = fields.Nested(CohortBreakdownSchema, allow_none=True)
