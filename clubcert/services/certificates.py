from __future__ import annotations

from flask import current_app

from ..app import db
from ..models import Certificate
from ..shared.certificates import render_certificate_pdf
from ..shared.issuance import CertificateIssuer
from ..shared.registrations import RegistrationSource
from ..shared.store import CertificateStore
from ..shared.verification import VerificationService


def build_issuer() -> CertificateIssuer:
    """Issuer bound to the request's database session and configured base URL."""
    return CertificateIssuer(
        CertificateStore(db.session),
        RegistrationSource(db.session),
        current_app.config["CERT_BASE_URL"],
    )


def build_verification() -> VerificationService:
    return VerificationService(CertificateStore(db.session))


def get_certificate_for_registration(
    registration_id: int,
    issuer: CertificateIssuer | None = None,
    template_dir: str | None = None,
) -> tuple[Certificate, bytes]:
    """Find or create the registration's certificate and render it.

    A first fetch creates the record with download_count 0; later fetches
    bump the counter before rendering. The competition line uses the
    competition's current name rather than a snapshot.
    """
    issuer = issuer or build_issuer()
    if template_dir is None:
        template_dir = current_app.config.get("CERT_TEMPLATE_DIR")

    registration = issuer.registrations.get_registration(registration_id)
    cert, created = issuer.issue_single(registration)
    pdf_bytes = render_certificate_pdf(
        cert, registration.competition.name, template_dir
    )
    current_app.logger.info(
        "[CERT-DOWNLOAD] registration=%s certificate=%s created=%s downloads=%s",
        registration_id,
        cert.id,
        created,
        cert.download_count,
    )
    return cert, pdf_bytes
