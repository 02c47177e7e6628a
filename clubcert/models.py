from __future__ import annotations

from sqlalchemy.orm import validates

from .app import db
from .shared.time import now_utc


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255))
    is_admin = db.Column(db.Boolean, default=False)
    is_event_organizer = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    __table_args__ = (
        db.Index("ix_users_email_lower", db.func.lower(email), unique=True),
    )

    @validates("email")
    def lower_email(self, key, value):  # pragma: no cover - simple normalizer
        return value.lower()

    @property
    def is_staff(self) -> bool:
        return bool(self.is_admin or self.is_event_organizer)


class Athlete(db.Model):
    __tablename__ = "athletes"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    full_name = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    user = db.relationship("User")

    @property
    def display_name(self) -> str:
        name = (self.full_name or "").strip()
        if not name and self.user:
            name = (self.user.full_name or "").strip()
        return name or "Unknown"


class Competition(db.Model):
    __tablename__ = "competitions"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255))
    city = db.Column(db.String(120))
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)


class Category(db.Model):
    __tablename__ = "competition_categories"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False
    )
    category_label = db.Column(db.String(255))
    age_class = db.Column(db.String(64))
    division = db.Column(db.String(64))
    gender = db.Column(db.String(16))

    @property
    def display_label(self) -> str:
        label = (self.category_label or "").strip()
        if label:
            return label
        return f"{self.age_class} - {self.division}"


class CompetitionRegistration(db.Model):
    __tablename__ = "competition_registrations"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer,
        db.ForeignKey("competitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("competition_categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    athlete_id = db.Column(
        db.Integer, db.ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False
    )
    qualification_score = db.Column(db.Float)
    rank = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    competition = db.relationship("Competition")
    category = db.relationship("Category")
    athlete = db.relationship("Athlete")


class Certificate(db.Model):
    __tablename__ = "certificates"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id = db.Column(
        db.Integer, db.ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False
    )
    recipient_name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(255), nullable=False)
    achievement = db.Column(db.String(64), nullable=False)
    rank = db.Column(db.Integer)
    total_score = db.Column(db.Float)
    validation_code = db.Column(db.String(32), nullable=False)
    validation_url = db.Column(db.String(512), nullable=False)
    template_type = db.Column(
        db.String(16), nullable=False, default="DEFAULT", server_default="DEFAULT"
    )
    download_count = db.Column(
        db.Integer, nullable=False, default=0, server_default="0"
    )
    issued_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc)
    __table_args__ = (
        db.UniqueConstraint(
            "competition_id",
            "recipient_id",
            name="uix_certificate_competition_recipient",
        ),
        db.UniqueConstraint(
            "validation_code", name="uix_certificates_validation_code"
        ),
    )
    competition = db.relationship("Competition")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "competitionId": self.competition_id,
            "recipientId": self.recipient_id,
            "recipientName": self.recipient_name,
            "category": self.category,
            "achievement": self.achievement,
            "rank": self.rank,
            "totalScore": self.total_score,
            "validationCode": self.validation_code,
            "validationUrl": self.validation_url,
            "templateType": self.template_type,
            "downloadCount": self.download_count,
            "issuedAt": self.issued_at.isoformat() if self.issued_at else None,
        }
