from flask import Blueprint, request, send_file
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...schemas.results import PollResultsSchema
from ...services.results import aggregate_results, export_rows
from ...utils.audit import safe_audit
from ...utils.rbac import admin_required
from ...utils.spreadsheet import XLSX_MIMETYPE, write_csv, write_xlsx

results_bp = Blueprint("results", __name__)
poll_results_schema = PollResultsSchema()

EXPORT_KINDS = {
    "voted": "voted_users",
    "not_voted": "not_voted_users",
}
EXPORT_FORMATS = {
    "csv": (write_csv, "text/csv"),
    "xlsx": (write_xlsx, XLSX_MIMETYPE),
}


def _include_hidden() -> bool:
    return request.args.get("include_hidden", "false").lower() in ("1", "true", "yes")


@results_bp.get("/<uuid:poll_id>/results")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Results"],
    "security": [{"BearerAuth": []}],
    "summary": "Poll tallies with voter details and cohort breakdown (admin)",
    "parameters": [
        {"in": "query", "name": "include_hidden", "type": "boolean", "required": False, "default": False},
    ],
    "responses": {200: {"description": "Results"}, 403: {"description": "Forbidden"}, 404: {"description": "Poll not found"}},
})
def poll_results(poll_id):
    aggregate = aggregate_results(poll_id, include_hidden=_include_hidden())

    safe_audit(
        "POLL_RESULTS_VIEWED",
        "POLL",
        entity_id=poll_id,
        details={"total_votes": aggregate["total_votes"]},
    )
    return poll_results_schema.dump(aggregate), 200


@results_bp.get("/<uuid:poll_id>/results/export")
@jwt_required()
@admin_required
@swag_from({
    "tags": ["Results"],
    "security": [{"BearerAuth": []}],
    "summary": "Download voted or not-voted users as CSV or .xlsx (admin)",
    "parameters": [
        {"in": "query", "name": "kind", "type": "string", "enum": list(EXPORT_KINDS), "default": "voted"},
        {"in": "query", "name": "format", "type": "string", "enum": list(EXPORT_FORMATS), "default": "csv"},
        {"in": "query", "name": "include_hidden", "type": "boolean", "required": False, "default": False},
    ],
    "produces": ["text/csv", XLSX_MIMETYPE],
    "responses": {200: {"description": "Spreadsheet file"}, 400: {"description": "Unknown kind or format"}, 404: {"description": "Poll not found"}},
})
def export_results(poll_id):
    kind = request.args.get("kind", "voted")
    if kind not in EXPORT_KINDS:
        return {"message": f"kind must be one of: {', '.join(EXPORT_KINDS)}"}, 400

    fmt = request.args.get("format", "csv").lower()
    if fmt not in EXPORT_FORMATS:
        return {"message": f"format must be one of: {', '.join(EXPORT_FORMATS)}"}, 400

    aggregate = aggregate_results(poll_id, include_hidden=_include_hidden())
    header, rows = export_rows(aggregate, kind)

    safe_audit(
        "POLL_RESULTS_EXPORTED",
        "POLL",
        entity_id=poll_id,
        details={"kind": kind, "format": fmt, "rows": len(rows)},
    )

    writer, mimetype = EXPORT_FORMATS[fmt]
    return send_file(
        writer(header, rows),
        mimetype=mimetype,
        as_attachment=True,
        download_name=f"{EXPORT_KINDS[kind]}.{fmt}",
    )
