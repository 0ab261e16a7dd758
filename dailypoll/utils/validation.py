from flask import abort
from marshmallow import ValidationError


def validate_or_abort(schema, payload):
    """Load ``payload`` through ``schema`` or abort with a VALIDATION_ERROR envelope."""
    try:
        return schema.load(payload)
    except ValidationError as err:
        abort(
            400,
            description={
                "code": "VALIDATION_ERROR",
                "message": "Validation error",
                "errors": err.messages,
            },
        )
