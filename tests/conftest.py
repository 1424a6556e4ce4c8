from decimal import Decimal

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.court import Court
from models.court_schedule import CourtSchedule
from models.store import Store
from models.user import User
from security.session import create_session
from utils.seed import get_or_create_role


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, *roles):
    user = User(email=email)
    for name in roles or ("USUARIO",):
        user.roles.append(get_or_create_role(name))
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def player(app):
    return make_user("player@example.com")


@pytest.fixture
def other_player(app):
    return make_user("other@example.com")


@pytest.fixture
def owner(app):
    return make_user("owner@example.com", "USUARIO", "STORE_OWNER")


@pytest.fixture
def rival_owner(app):
    user = make_user("rival@example.com", "USUARIO", "STORE_OWNER")
    db.session.add(Store(name="Rival Arena", owner=user))
    db.session.commit()
    return user


@pytest.fixture
def super_admin(app):
    return make_user("root@example.com", "SUPER_ADMIN")


@pytest.fixture
def store(owner):
    store = Store(name="Central Futbol", owner=owner)
    db.session.add(store)
    db.session.commit()
    return store


@pytest.fixture
def court(store):
    court = Court(store_id=store.id, name="Cancha 1", price_per_hour=Decimal("20000"))
    db.session.add(court)
    db.session.commit()
    return court


@pytest.fixture
def monday_schedule(court):
    # 08:00-10:00 and 18:00-22:00 on Mondays, one-hour slots
    rows = [
        CourtSchedule(court_id=court.id, day_of_week=1, start_minute=8 * 60, end_minute=10 * 60, slot_duration=60),
        CourtSchedule(court_id=court.id, day_of_week=1, start_minute=18 * 60, end_minute=22 * 60, slot_duration=60),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.fixture
def login(client):
    def _login(user):
        token = create_session(user.id)
        client.set_cookie(client.application.config["AUTH_COOKIE_NAME"], token)
        return client
    return _login
