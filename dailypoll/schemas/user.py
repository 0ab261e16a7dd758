from ..extensions import ma
from marshmallow import fields


class ProfileSchema(ma.Schema):
    full_name = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)
    gender = fields.Str(allow_none=True)
    hostel = fields.Str(allow_none=True)
    is_visible = fields.Bool()


class UserSchema(ma.Schema):
    id = fields.UUID()
    email = fields.Email()
    role = fields.Str()
    is_admin = fields.Bool()
    is_active = fields.Bool()
    email_verified = fields.Bool()
    created_at = fields.DateTime()
    profile = fields.Nested(ProfileSchema, allow_none=True)
