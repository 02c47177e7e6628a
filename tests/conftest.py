import pathlib
import sys
from datetime import date

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from clubcert.app import create_app, db
from clubcert.models import (
    Athlete,
    Category,
    Competition,
    CompetitionRegistration,
    User,
)
from clubcert.shared.issuance import CertificateIssuer
from clubcert.shared.registrations import RegistrationSource
from clubcert.shared.store import CertificateStore

BASE_URL = "https://club.example.com"


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("CERT_BASE_URL", BASE_URL + "/")
    monkeypatch.setenv("CERT_TEMPLATE_DIR", str(tmp_path / "cert_templates"))
    application = create_app()
    application.config["TESTING"] = True
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(email, **flags):
        user = User(email=email, full_name=flags.pop("full_name", None), **flags)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as sess:
            sess["user_id"] = user.id

    return _login


@pytest.fixture
def competition(app):
    comp = Competition(
        name="Spring Open",
        location="Riverside Range",
        city="Leeds",
        start_date=date(2025, 3, 5),
        end_date=date(2025, 3, 6),
    )
    db.session.add(comp)
    db.session.commit()
    return comp


@pytest.fixture
def make_category(app, competition):
    def _make_category(label=None, age_class="Senior", division="Recurve", comp=None):
        category = Category(
            competition_id=(comp or competition).id,
            category_label=label,
            age_class=age_class,
            division=division,
        )
        db.session.add(category)
        db.session.commit()
        return category

    return _make_category


@pytest.fixture
def category(make_category):
    return make_category("Recurve Men")


@pytest.fixture
def register(app, competition, category):
    def _register(name, score=None, *, cat=None, rank=None, user=None, comp=None):
        athlete = Athlete(full_name=name, user_id=user.id if user else None)
        db.session.add(athlete)
        db.session.flush()
        registration = CompetitionRegistration(
            competition_id=(comp or competition).id,
            category_id=(cat or category).id,
            athlete_id=athlete.id,
            qualification_score=score,
            rank=rank,
        )
        db.session.add(registration)
        db.session.commit()
        return registration

    return _register


@pytest.fixture
def make_issuer(app):
    def _make_issuer(codes=None, clock=None):
        kwargs = {}
        if codes is not None:
            supply = iter(codes)
            kwargs["code_factory"] = lambda: next(supply)
        if clock is not None:
            kwargs["clock"] = clock
        return CertificateIssuer(
            CertificateStore(db.session),
            RegistrationSource(db.session),
            BASE_URL,
            **kwargs,
        )

    return _make_issuer
