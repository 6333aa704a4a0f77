import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG"] = "false"
os.environ["ENVIRONMENT"] = "development"
os.environ["FOLLOWUP_MAX_ATTEMPTS"] = "3"
os.environ["FOLLOWUP_RETRY_DELAY_SECONDS"] = "0"
os.environ["DEV_MAIL_DIR"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from risk_tracker.database import Base, get_db, get_session_factory, User as UserDB
from risk_tracker.main import app
from risk_tracker.services.auth_service import AuthService
from risk_tracker.services.gateway import get_prediction_gateway
from risk_tracker.services.mail_service import get_mail_service
from tests.fakes import FakeGateway, FakeMailer, TEST_PASSWORD


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(session_factory, gateway, mailer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_prediction_gateway] = lambda: gateway
    app.dependency_overrides[get_mail_service] = lambda: mailer

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def create_user(db):
    def _create(email="dana@example.com", name="Dana Owner", role="user", password=TEST_PASSWORD):
        user = UserDB(
            email=email,
            name=name,
            role=role,
            hashed_password=AuthService.get_password_hash(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _create


@pytest.fixture
def user(create_user):
    return create_user()


@pytest.fixture
def admin(create_user):
    return create_user(email="admin@example.com", name="Ada Admin", role="admin")
