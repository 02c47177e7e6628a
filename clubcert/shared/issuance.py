from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Mapping

from ..models import Certificate, CompetitionRegistration
from .codes import build_validation_url, generate_validation_code
from .constants import (
    ACHIEVEMENT_PARTICIPANT,
    PODIUM_SIZE,
    RANK_ACHIEVEMENTS,
    RANK_TEMPLATES,
    TEMPLATE_DEFAULT,
)
from .errors import CertificateConflict
from .ranking import category_label, ordinal, rank_by_category
from .registrations import RegistrationSource
from .store import CertificateStore
from .time import now_utc

logger = logging.getLogger("clubcert.certificates")


def template_for_rank(rank: int | None) -> str:
    return RANK_TEMPLATES.get(rank, TEMPLATE_DEFAULT)


def single_achievement(rank: int | None) -> str:
    return RANK_ACHIEVEMENTS.get(rank, ACHIEVEMENT_PARTICIPANT)


def place_achievement(rank: int | None) -> str:
    if rank and rank <= PODIUM_SIZE:
        return f"{ordinal(rank)} Place"
    return ACHIEVEMENT_PARTICIPANT


def podium_rank(rank: int | None) -> int | None:
    if rank and 1 <= rank <= PODIUM_SIZE:
        return rank
    return None


class CertificateIssuer:
    """Creates certificate records, at most one per (competition, athlete)."""

    def __init__(
        self,
        store: CertificateStore,
        registrations: RegistrationSource,
        base_url: str,
        *,
        code_factory: Callable[[], str] = generate_validation_code,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.store = store
        self.registrations = registrations
        self.base_url = base_url
        self.code_factory = code_factory
        self.clock = clock

    def _create(self, **fields) -> Certificate:
        code = self.code_factory()
        return self.store.create(
            validation_code=code,
            validation_url=build_validation_url(self.base_url, code),
            issued_at=self.clock(),
            download_count=0,
            **fields,
        )

    def _create_or_existing(self, **fields) -> tuple[Certificate, bool]:
        """Insert a certificate; on a lost race return the stored row instead.

        A conflict that leaves no row for the pair came from a validation
        code collision, so one retry with a fresh code is made.
        """
        competition_id = fields["competition_id"]
        recipient_id = fields["recipient_id"]
        attempts = 0
        while True:
            try:
                return self._create(**fields), True
            except CertificateConflict:
                existing = self.store.find_for_recipient(competition_id, recipient_id)
                if existing is not None:
                    return existing, False
                if attempts >= 1:
                    raise
                attempts += 1

    def issue_single(
        self, registration: CompetitionRegistration
    ) -> tuple[Certificate, bool]:
        competition_id = registration.competition_id
        recipient_id = registration.athlete_id
        cert = self.store.find_for_recipient(competition_id, recipient_id)
        created = False
        if cert is None:
            rank = registration.rank
            cert, created = self._create_or_existing(
                competition_id=competition_id,
                recipient_id=recipient_id,
                recipient_name=registration.athlete.display_name,
                category=category_label(registration),
                achievement=single_achievement(rank),
                rank=podium_rank(rank),
                total_score=registration.qualification_score,
                template_type=template_for_rank(rank),
            )
        if created:
            logger.info(
                "[CERT] created id=%s competition=%s recipient=%s code=%s",
                cert.id,
                competition_id,
                recipient_id,
                cert.validation_code,
            )
        else:
            cert = self.store.increment_download_count(cert)
        return cert, created

    def issue_bulk(
        self, competition_id: int, include_participants: bool = False
    ) -> list[Certificate]:
        self.registrations.get_competition(competition_id)
        ranked = rank_by_category(self.registrations.for_competition(competition_id))

        created: list[Certificate] = []
        skipped = 0
        for label, entries in ranked.items():
            for entry in entries:
                if not include_participants and entry.rank > PODIUM_SIZE:
                    continue
                registration = entry.registration
                recipient_id = registration.athlete_id
                if self.store.find_for_recipient(competition_id, recipient_id):
                    skipped += 1
                    continue
                cert, is_new = self._create_or_existing(
                    competition_id=competition_id,
                    recipient_id=recipient_id,
                    recipient_name=registration.athlete.display_name,
                    category=label,
                    achievement=place_achievement(entry.rank),
                    rank=podium_rank(entry.rank),
                    total_score=registration.qualification_score,
                    template_type=template_for_rank(entry.rank),
                )
                if is_new:
                    created.append(cert)
                else:
                    skipped += 1

        logger.info(
            "[CERT-BULK] competition=%s include_participants=%s created=%s skipped=%s",
            competition_id,
            include_participants,
            len(created),
            skipped,
        )
        return created

    def issue_manual(
        self, competition_id: int, recipients: list[Mapping]
    ) -> list[Certificate]:
        """Issue certificates for an explicit recipient list.

        Each recipient mapping carries ``athlete_id`` and ``category`` and
        optionally ``name``, ``rank``, ``score`` and ``achievement``.
        Recipients that already hold a certificate are skipped.
        """
        self.registrations.get_competition(competition_id)

        created: list[Certificate] = []
        for recipient in recipients:
            recipient_id = recipient["athlete_id"]
            if self.store.find_for_recipient(competition_id, recipient_id):
                continue
            rank = recipient.get("rank")
            cert, is_new = self._create_or_existing(
                competition_id=competition_id,
                recipient_id=recipient_id,
                recipient_name=recipient.get("name") or f"Athlete {recipient_id}",
                category=recipient["category"],
                achievement=recipient.get("achievement") or place_achievement(rank),
                rank=rank or None,
                total_score=recipient.get("score"),
                template_type=template_for_rank(rank),
            )
            if is_new:
                created.append(cert)

        logger.info(
            "[CERT-MANUAL] competition=%s requested=%s created=%s",
            competition_id,
            len(recipients),
            len(created),
        )
        return created
