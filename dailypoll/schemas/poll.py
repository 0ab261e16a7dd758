from marshmallow import Schema, fields, validate, validates_schema, post_load, ValidationError

from ..extensions import ma


def _clean_options(options):
    return [o.strip() for o in options if o and o.strip()]


class PollCreateSchema(Schema):
    question = fields.Str(required=True, validate=validate.Length(min=1))
    poll_date = fields.Date(required=True)
    start_time = fields.Time(required=True)
    end_time = fields.Time(required=True)
    is_active = fields.Bool(load_default=True)
    options = fields.List(fields.Str(validate=validate.Length(max=200)), required=True)

    @validates_schema
    def check_window_and_options(self, data, **kwargs):
        if "question" in data and not data["question"].strip():
            raise ValidationError("Question must not be blank", field_name="question")
        start, end = data.get("start_time"), data.get("end_time")
        if start is not None and end is not None and start >= end:
            raise ValidationError("end_time must be after start_time", field_name="end_time")
        if "options" in data and len(_clean_options(data["options"])) < 2:
            raise ValidationError("At least two non-empty options are required", field_name="options")

    @post_load
    def strip_values(self, data, **kwargs):
        if "question" in data:
            data["question"] = data["question"].strip()
        if "options" in data:
            data["options"] = _clean_options(data["options"])
        return data


class PollUpdateSchema(PollCreateSchema):
    question = fields.Str(validate=validate.Length(min=1))
    poll_date = fields.Date()
    start_time = fields.Time()
    end_time = fields.Time()
    is_active = fields.Bool()
    options = fields.List(fields.Str(validate=validate.Length(max=200)))

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")


class PollOptionReadSchema(ma.Schema):
    id = fields.UUID()
    option_text = fields.Str()
    sort_order = fields.Int()


class PollReadSchema(ma.Schema):
    id = fields.UUID()
    question = fields.Str()
    poll_date = fields.Date()
    start_time = fields.Method("_start")
    end_time = fields.Method("_end")
    is_active = fields.Bool()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    options = fields.List(fields.Nested(PollOptionReadSchema))

    def _start(self, poll):
        return poll.start_time.strftime("%H:%M")

    def _end(self, poll):
        return poll.end_time.strftime("%H:%M")
