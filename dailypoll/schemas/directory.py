from marshmallow import Schema, fields, validate, post_load

from ..extensions import ma
from ..models.authorized_identity import AuthorizedIdentity


class IdentityCreateSchema(Schema):
    email = fields.Email(required=True)
    phone = fields.Str(required=True, validate=validate.Length(min=1, max=32))
    full_name = fields.Str(allow_none=True, validate=validate.Length(max=200))
    gender = fields.Str(
        load_default=AuthorizedIdentity.GENDER_MALE,
        validate=validate.OneOf(AuthorizedIdentity.VALID_GENDERS),
    )
    hostel = fields.Str(allow_none=True, validate=validate.Length(max=100))
    is_visible = fields.Bool(load_default=True)

    @post_load
    def normalize(self, data, **kwargs):
        data["email"] = AuthorizedIdentity.normalize_email(data["email"])
        data["phone"] = data["phone"].strip()
        data["full_name"] = (data.get("full_name") or "").strip() or None
        data["hostel"] = AuthorizedIdentity.clean_hostel(data["gender"], data.get("hostel"))
        return data


class IdentityReadSchema(ma.Schema):
    id = fields.UUID()
    email = fields.Str()
    phone = fields.Str()
    full_name = fields.Str(allow_none=True)
    gender = fields.Str()
    hostel = fields.Str(allow_none=True)
    is_registered = fields.Bool()
    is_visible = fields.Bool()
    created_at = fields.DateTime()


class ImportSummarySchema(Schema):
    processed = fields.Int()
    created = fields.Int()
    updated = fields.Int()
    skipped = fields.Int()
