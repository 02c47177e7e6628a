from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession

from ..models import Certificate
from .errors import CertificateConflict

logger = logging.getLogger("clubcert.store")


def _conflict_field(error: IntegrityError) -> str | None:
    details = str(getattr(error, "orig", None) or error).lower()
    if "validation_code" in details:
        return "validation_code"
    if "competition_id" in details or "recipient_id" in details:
        return "recipient"
    return None


class CertificateStore:
    """Certificate persistence over an injected SQLAlchemy session.

    The table's unique constraints on (competition_id, recipient_id) and on
    validation_code are the authoritative duplicate guard; ``create`` reports
    a rejected insert as :class:`CertificateConflict` after rolling back.
    """

    def __init__(self, session: DbSession):
        self.session = session

    def get(self, cert_id: int) -> Certificate | None:
        return self.session.get(Certificate, cert_id)

    def find_for_recipient(
        self, competition_id: int, recipient_id: int
    ) -> Certificate | None:
        return (
            self.session.query(Certificate)
            .filter_by(competition_id=competition_id, recipient_id=recipient_id)
            .one_or_none()
        )

    def find_by_code(self, code: str) -> Certificate | None:
        return (
            self.session.query(Certificate)
            .filter_by(validation_code=code)
            .one_or_none()
        )

    def list_for_competition(self, competition_id: int) -> list[Certificate]:
        return (
            self.session.query(Certificate)
            .filter(Certificate.competition_id == competition_id)
            .order_by(
                Certificate.category.asc(),
                Certificate.rank.asc().nullslast(),
                Certificate.id.asc(),
            )
            .all()
        )

    def create(self, **fields) -> Certificate:
        cert = Certificate(**fields)
        self.session.add(cert)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            field = _conflict_field(exc)
            logger.info(
                "[CERT-CONFLICT] competition=%s recipient=%s field=%s",
                fields.get("competition_id"),
                fields.get("recipient_id"),
                field,
            )
            raise CertificateConflict(
                "certificate already exists", field=field
            ) from exc
        return cert

    def increment_download_count(self, cert: Certificate) -> Certificate:
        (
            self.session.query(Certificate)
            .filter(Certificate.id == cert.id)
            .update(
                {Certificate.download_count: Certificate.download_count + 1},
                synchronize_session=False,
            )
        )
        self.session.commit()
        self.session.refresh(cert)
        return cert

    def delete(self, cert: Certificate) -> None:
        self.session.delete(cert)
        self.session.commit()
