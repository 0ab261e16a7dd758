"""Bulk maintenance of the voter directory."""
from flask import current_app

from ..exceptions import ImportRejected
from ..extensions import db
from ..models.authorized_identity import AuthorizedIdentity
from ..utils.audit import audit_log

_FALSE_WORDS = {"false", "0", "no", "n", "hidden"}


def _parse_visible(value) -> bool:
    if value is None or str(value).strip() == "":
        return True
    return str(value).strip().lower() not in _FALSE_WORDS


def normalize_row(row: dict) -> dict | None:
    """Turn one spreadsheet row into directory fields, or None when email/phone is missing."""
    email = AuthorizedIdentity.normalize_email(row.get("email"))
    phone = (row.get("phone") or "").strip()
    if not email or "@" not in email or not phone:
        return None

    gender = (row.get("gender") or "").strip().lower() or AuthorizedIdentity.GENDER_MALE
    return {
        "email": email,
        "phone": phone,
        "full_name": (row.get("full_name") or "").strip() or None,
        "gender": gender,
        "hostel": AuthorizedIdentity.clean_hostel(gender, row.get("hostel")),
        "is_visible": _parse_visible(row.get("is_visible")),
    }


def import_identities(rows: list[dict]) -> dict:
    """Upsert directory entries keyed by email.

    Contact and demographic fields of an existing entry are overwritten; its
    ``is_registered`` flag is left alone so imports never reopen registration.
    Within one file the last row for an email wins.
    """
    if not rows:
        raise ImportRejected("File is empty")

    limit = current_app.config.get("MAX_IMPORT_ROWS", 5000)
    if len(rows) > limit:
        raise ImportRejected(f"File has {len(rows)} rows; the limit is {limit}")

    by_email = {}
    skipped = 0
    for row in rows:
        fields = normalize_row(row)
        if fields is None:
            skipped += 1
            continue
        by_email[fields["email"]] = fields

    existing = {}
    if by_email:
        existing = {
            i.email: i
            for i in AuthorizedIdentity.query.filter(AuthorizedIdentity.email.in_(list(by_email))).all()
        }

    created = updated = 0
    for email, fields in by_email.items():
        identity = existing.get(email)
        if identity is None:
            db.session.add(AuthorizedIdentity(is_registered=False, **fields))
            created += 1
        else:
            for key, value in fields.items():
                setattr(identity, key, value)
            updated += 1

    summary = {
        "processed": created + updated,
        "created": created,
        "updated": updated,
        "skipped": skipped,
    }
    audit_log(action="DIRECTORY_IMPORTED", entity_type="DIRECTORY", details=summary)
    db.session.commit()

    current_app.logger.info("Directory import: %s", summary)
    return summary
