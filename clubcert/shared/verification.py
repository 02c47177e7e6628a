from __future__ import annotations

from ..models import Certificate
from .errors import CertificateNotFound
from .store import CertificateStore


class VerificationService:
    """Read-only lookup of certificates by their public validation code."""

    def __init__(self, store: CertificateStore):
        self.store = store

    def get_by_code(self, code: str) -> Certificate:
        cert = self.store.find_by_code((code or "").strip())
        if cert is None:
            raise CertificateNotFound(f"No certificate for code {code!r}")
        return cert

    @staticmethod
    def public_summary(cert: Certificate) -> dict:
        competition = cert.competition
        return {
            "recipientName": cert.recipient_name,
            "category": cert.category,
            "achievement": cert.achievement,
            "rank": cert.rank,
            "totalScore": cert.total_score,
            "issuedAt": cert.issued_at.isoformat() if cert.issued_at else None,
            "validationCode": cert.validation_code,
            "competition": {
                "name": competition.name,
                "location": competition.location,
                "city": competition.city,
                "startDate": (
                    competition.start_date.isoformat() if competition.start_date else None
                ),
                "endDate": (
                    competition.end_date.isoformat() if competition.end_date else None
                ),
            }
            if competition
            else None,
        }
