import csv

from flask import Blueprint, request, current_app
from flasgger import swag_from
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...exceptions import IdentityExists, IdentityNotFound, ImportRejected
from ...extensions import db
from ...models.authorized_identity import AuthorizedIdentity
from ...schemas.directory import IdentityCreateSchema, IdentityReadSchema, ImportSummarySchema
from ...services.directory import import_identities
from ...utils.audit import audit_log
from ...utils.rbac import admin_required
from ...utils.spreadsheet import read_rows
from ...utils.validation import validate_or_abort

directory_bp = Blueprint("directory", __name__)

identity_create_schema = IdentityCreateSchema()
identity_read_schema = IdentityReadSchema()
identity_read_many_schema = IdentityReadSchema(many=True)
import_summary_schema = ImportSummarySchema()


@directory_bp.get("/")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Directory"],
    "security": [{"BearerAuth": []}],
    "summary": "List authorized voters, newest first (admin)",
    "responses": {200: {"description": "OK"}, 403: {"description": "Forbidden"}},
})
def list_identities():
    identities = AuthorizedIdentity.query.order_by(AuthorizedIdentity.created_at.desc()).all()
    return {"identities": identity_read_many_schema.dump(identities), "count": len(identities)}, 200


@directory_bp.post("/")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Directory"],
    "security": [{"BearerAuth": []}],
    "summary": "Authorize one voter (admin)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "email": {"type": "string", "example": "alice@example.com"},
                "phone": {"type": "string", "example": "9876543210"},
                "full_name": {"type": "string", "example": "Alice"},
                "gender": {"type": "string", "enum": ["male", "female"]},
                "hostel": {"type": "string", "example": "Kaveri"},
                "is_visible": {"type": "boolean"},
            },
            "required": ["email", "phone"],
        },
    }],
    "responses": {201: {"description": "Created"}, 400: {"description": "Validation error"}, 409: {"description": "Email already exists"}},
})
def add_identity():
    payload = validate_or_abort(identity_create_schema, request.get_json(silent=True) or {})

    if AuthorizedIdentity.find_by_email(payload["email"]):
        raise IdentityExists()

    identity = AuthorizedIdentity(is_registered=False, **payload)
    try:
        db.session.add(identity)
        db.session.flush()
        audit_log(
            action="DIRECTORY_ENTRY_ADDED",
            entity_type="DIRECTORY",
            entity_id=identity.id,
            details={"email": identity.email},
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise IdentityExists()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error adding directory entry")
        return {"message": "Failed to add user"}, 500

    return {"identity": identity_read_schema.dump(identity)}, 201


@directory_bp.delete("/<uuid:identity_id>")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Directory"],
    "security": [{"BearerAuth": []}],
    "summary": "Remove a voter from the directory (admin)",
    "description": "An already provisioned login account is not removed.",
    "responses": {200: {"description": "Removed"}, 404: {"description": "Not found"}},
})
def delete_identity(identity_id):
    identity = db.session.get(AuthorizedIdentity, identity_id)
    if identity is None:
        raise IdentityNotFound()

    try:
        audit_log(
            action="DIRECTORY_ENTRY_REMOVED",
            entity_type="DIRECTORY",
            entity_id=identity.id,
            details={"email": identity.email},
        )
        db.session.delete(identity)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error removing directory entry")
        return {"message": "Failed to remove user"}, 500

    return {"message": "User removed"}, 200


@directory_bp.post("/import")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Directory"],
    "security": [{"BearerAuth": []}],
    "summary": "Bulk upsert voters from a CSV or .xlsx file (admin)",
    "description": (
        "Header row required. Columns: email, phone (required); full_name, gender "
        "(default male), hostel (female rows only), is_visible. Rows are upserted by email."
    ),
    "consumes": ["multipart/form-data"],
    "parameters": [{"in": "formData", "name": "file", "type": "file", "required": True}],
    "responses": {200: {"description": "Import summary"}, 400: {"description": "Missing, unreadable or empty file"}},
})
def import_directory():
    file = request.files.get("file")
    if not file or file.filename == "":
        raise ImportRejected("Please choose a .csv or .xlsx file to upload")

    try:
        rows = read_rows(file)
    except (ValueError, csv.Error) as e:
        raise ImportRejected(f"Error reading file: {e}")

    try:
        summary = import_identities(rows)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("DB error importing directory")
        return {"message": "Upload failed"}, 500

    return {"message": f"{summary['processed']} users processed.", **import_summary_schema.dump(summary)}, 200
