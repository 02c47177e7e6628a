from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from ..app import db
from ..services.certificates import (
    build_issuer,
    build_verification,
    get_certificate_for_registration,
)
from ..shared.errors import (
    CertificateNotFound,
    CompetitionNotFound,
    RegistrationNotFound,
    RenderingFailed,
    ValidationError,
)
from ..shared.rbac import login_required, staff_required
from ..shared.registrations import RegistrationSource
from ..shared.store import CertificateStore

bp = Blueprint("certificates", __name__, url_prefix="/certificates")


def _not_found(message: str):
    return jsonify({"success": False, "message": message}), 404


def _created_response(created):
    return jsonify(
        {
            "success": True,
            "message": f"{len(created)} certificate(s) generated",
            "data": [cert.to_dict() for cert in created],
        }
    )


def _competition_payload(competition) -> dict | None:
    if competition is None:
        return None
    return {
        "name": competition.name,
        "location": competition.location,
        "startDate": competition.start_date.isoformat() if competition.start_date else None,
        "endDate": competition.end_date.isoformat() if competition.end_date else None,
    }


def _optional_number(entry: dict, key: str, kind):
    value = entry.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValidationError(f"{key} must be a number")
    return value


def _parse_recipients(payload: dict) -> tuple[int, list[dict]]:
    competition_id = payload.get("competitionId")
    recipients = payload.get("recipients")
    if (
        not isinstance(competition_id, int)
        or isinstance(competition_id, bool)
        or not isinstance(recipients, list)
    ):
        raise ValidationError("competitionId and recipients array required")
    parsed = []
    for entry in recipients:
        if not isinstance(entry, dict):
            raise ValidationError("each recipient must be an object")
        athlete_id = entry.get("athleteId")
        category = entry.get("category")
        category = category.strip() if isinstance(category, str) else ""
        if not isinstance(athlete_id, int) or isinstance(athlete_id, bool) or not category:
            raise ValidationError("each recipient requires athleteId and category")
        rank = _optional_number(entry, "rank", int)
        if rank is not None and rank < 1:
            raise ValidationError("rank must be positive")
        parsed.append(
            {
                "athlete_id": athlete_id,
                "name": entry.get("name"),
                "category": category,
                "rank": rank,
                "score": _optional_number(entry, "score", (int, float)),
                "achievement": entry.get("achievement"),
            }
        )
    return competition_id, parsed


@bp.get("/verify/<code>")
def verify(code: str):
    try:
        cert = build_verification().get_by_code(code)
    except CertificateNotFound:
        return _not_found("Certificate not found")
    data = cert.to_dict()
    data["competition"] = _competition_payload(cert.competition)
    return jsonify({"success": True, "data": data})


@bp.get("/registration/<int:registration_id>/download")
@login_required
def download(registration_id: int, current_user):
    try:
        registration = RegistrationSource(db.session).get_registration(registration_id)
    except RegistrationNotFound:
        return _not_found("Registration not found")
    athlete = registration.athlete
    owner_id = athlete.user_id if athlete else None
    if not (current_user.is_staff or owner_id == current_user.id):
        return jsonify({"success": False, "message": "Forbidden"}), 403

    try:
        _, pdf_bytes = get_certificate_for_registration(registration_id)
    except RegistrationNotFound:
        return _not_found("Registration not found")
    except RenderingFailed as exc:
        db.session.rollback()
        current_app.logger.exception(
            "[CERT-RENDER-FAIL] registration=%s", registration_id
        )
        return jsonify({"success": False, "message": str(exc)}), 500

    resp = Response(pdf_bytes, mimetype="application/pdf")
    resp.headers["Content-Disposition"] = (
        f'attachment; filename="certificate-{registration_id}.pdf"'
    )
    return resp


@bp.get("/competition/<int:competition_id>")
@staff_required
def list_for_competition(competition_id: int, current_user):
    certs = CertificateStore(db.session).list_for_competition(competition_id)
    return jsonify({"success": True, "data": [cert.to_dict() for cert in certs]})


@bp.post("/generate-bulk/<int:competition_id>")
@staff_required
def generate_bulk(competition_id: int, current_user):
    payload = request.get_json(silent=True) or {}
    include_participants = payload.get("includeParticipants", False)
    if not isinstance(include_participants, bool):
        return jsonify({"success": False, "message": "includeParticipants must be a boolean"}), 400
    try:
        created = build_issuer().issue_bulk(competition_id, include_participants)
    except CompetitionNotFound:
        return _not_found("Competition not found")
    except Exception:
        db.session.rollback()
        current_app.logger.exception("[CERT-FAIL] bulk competition=%s", competition_id)
        return (
            jsonify({"success": False, "message": "Failed to generate certificates"}),
            500,
        )
    return _created_response(created)


@bp.post("/generate")
@staff_required
def generate(current_user):
    payload = request.get_json(silent=True) or {}
    try:
        competition_id, recipients = _parse_recipients(payload)
    except ValidationError as exc:
        return jsonify({"success": False, "message": str(exc)}), 400
    try:
        created = build_issuer().issue_manual(competition_id, recipients)
    except CompetitionNotFound:
        return _not_found("Competition not found")
    except Exception:
        db.session.rollback()
        current_app.logger.exception("[CERT-FAIL] manual competition=%s", competition_id)
        return (
            jsonify({"success": False, "message": "Failed to generate certificates"}),
            500,
        )
    return _created_response(created)


@bp.get("/<int:cert_id>")
@login_required
def get_certificate(cert_id: int, current_user):
    cert = CertificateStore(db.session).get(cert_id)
    if not cert:
        return _not_found("Certificate not found")
    data = cert.to_dict()
    data["competition"] = _competition_payload(cert.competition)
    return jsonify({"success": True, "data": data})


@bp.delete("/<int:cert_id>")
@staff_required
def delete_certificate(cert_id: int, current_user):
    store = CertificateStore(db.session)
    cert = store.get(cert_id)
    if not cert:
        return _not_found("Certificate not found")
    store.delete(cert)
    current_app.logger.info(
        "[CERT-DELETE] id=%s by user=%s", cert_id, current_user.id
    )
    return jsonify({"success": True, "message": "Certificate deleted"})
