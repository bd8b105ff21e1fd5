import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import copy
import random

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from personaforge.config.database import Base, configure_sqlite_connections, get_db
from personaforge.endpoints.identities import get_identity_acquirer, get_rng
from personaforge.integrations.randomuser import RandomUserClient
from personaforge.main import app
from personaforge.models import Operator
from personaforge.services.identity_source import IdentityAcquirer
from personaforge.services.passwords import hash_password
from personaforge.services.token import issue_token

OPERATOR_PASSWORD = "Correct-Horse-42!"

RANDOMUSER_RECORD = {
    "gender": "female",
    "name": {"title": "Ms", "first": "Emma", "last": "Janssens"},
    "location": {
        "street": {"number": 12, "name": "Kerkstraat"},
        "city": "Gent",
        "state": "Oost-Vlaanderen",
        "country": "Belgium",
        "postcode": 9000,
    },
    "email": "emma.janssens@example.com",
    "dob": {"date": "1996-04-02T08:15:00.000Z", "age": 28},
    "registered": {"date": "2012-09-14T10:00:00.000Z", "age": 12},
    "phone": "0412 34 56 78",
    "picture": {
        "large": "https://randomuser.me/api/portraits/women/12.jpg",
        "medium": "https://randomuser.me/api/portraits/med/women/12.jpg",
    },
    "nat": "BE",
}


def make_record(**overrides):
    """A randomuser.me record with top-level fields replaced."""
    record = copy.deepcopy(RANDOMUSER_RECORD)
    record.update(overrides)
    return record


def record_with_age(age: int):
    record = make_record()
    record["dob"]["age"] = age
    return record


class ScriptedSource:
    """Answers upstream calls from a list of records, repeating the last one."""

    def __init__(self, records):
        self.records = list(records)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.records)) - 1
        return httpx.Response(200, json={"results": [self.records[index]], "info": {}})

    @property
    def calls(self) -> int:
        return len(self.requests)


def make_acquirer(handler, max_attempts: int = 25) -> IdentityAcquirer:
    client = RandomUserClient(
        base_url="https://randomuser.test/api/",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )
    return IdentityAcquirer(client=client, max_attempts=max_attempts)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite_connections(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def create_operator(session, email="agent@example.org", matricule="412345678") -> Operator:
    operator = Operator(
        first_name="Lena",
        last_name="Peeters",
        matricule=matricule,
        email=email,
        password_hash=hash_password(OPERATOR_PASSWORD),
        language="en",
    )
    session.add(operator)
    session.commit()
    session.refresh(operator)
    return operator


@pytest.fixture
def operator(db_session):
    return create_operator(db_session)


@pytest.fixture
def other_operator(db_session):
    return create_operator(db_session, email="other@example.org", matricule="487654321")


@pytest.fixture
def source():
    return ScriptedSource([RANDOMUSER_RECORD])


@pytest.fixture
def client(session_factory, source):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_acquirer] = lambda: make_acquirer(source)
    app.dependency_overrides[get_rng] = lambda: random.Random(7)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(operator: Operator) -> dict:
    return {"Authorization": f"Bearer {issue_token(operator).access_token}"}
