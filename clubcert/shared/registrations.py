from __future__ import annotations

from sqlalchemy.orm import Session as DbSession
from sqlalchemy.orm import joinedload

from ..models import Competition, CompetitionRegistration
from .errors import CompetitionNotFound, RegistrationNotFound


class RegistrationSource:
    def __init__(self, session: DbSession):
        self.session = session

    def get_competition(self, competition_id: int) -> Competition:
        competition = self.session.get(Competition, competition_id)
        if competition is None:
            raise CompetitionNotFound(f"Competition {competition_id} not found")
        return competition

    def get_registration(self, registration_id: int) -> CompetitionRegistration:
        registration = (
            self.session.query(CompetitionRegistration)
            .options(
                joinedload(CompetitionRegistration.competition),
                joinedload(CompetitionRegistration.category),
                joinedload(CompetitionRegistration.athlete),
            )
            .filter(CompetitionRegistration.id == registration_id)
            .one_or_none()
        )
        if registration is None:
            raise RegistrationNotFound(f"Registration {registration_id} not found")
        return registration

    def for_competition(self, competition_id: int) -> list[CompetitionRegistration]:
        # ascending id keeps equal scores in registration order when ranked
        return (
            self.session.query(CompetitionRegistration)
            .options(
                joinedload(CompetitionRegistration.category),
                joinedload(CompetitionRegistration.athlete),
            )
            .filter(CompetitionRegistration.competition_id == competition_id)
            .order_by(CompetitionRegistration.id.asc())
            .all()
        )
