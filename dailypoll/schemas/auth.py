from marshmallow import Schema, fields, validate, pre_load


class RegisterUserSchema(Schema):
    """First-login provisioning request: the phone number is the password."""
    email = fields.Email(required=True)
    phone = fields.Str(required=True, validate=validate.Length(min=1, max=32))


class SetupAdminSchema(Schema):
    email = fields.Email(required=True)
    password = fields.Str(required=True, validate=validate.Length(min=6, max=128))


class LoginSchema(Schema):
    email = fields.Email(required=True)
    # Voters sign in with their phone number, so no minimum beyond non-empty
    password = fields.Str(required=True, validate=validate.Length(min=1, max=128))

    @pre_load
    def strip_credentials(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("email", "password"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        return data
