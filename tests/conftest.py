import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import User
from app.utils.security import create_access_token, hash_password

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """FastAPI test client with the database dependency overridden."""

    def override_get_db():
        test_db = TestingSessionLocal()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)


def create_user(session, email="alice@example.com", username="alice", name="Alice Liddell",
                password="Password123!"):
    user = User(
        email=email,
        username=username,
        name=name,
        password_hash=hash_password(password) if password else "",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def bearer_headers(user):
    token = create_access_token(data={"sub": user.email, "user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(db_session):
    return create_user(db_session)


@pytest.fixture
def auth_headers(test_user):
    """Valid JWT for test_user"""
    return bearer_headers(test_user)


@pytest.fixture
def make_user(db_session):
    """Factory for extra users in the same database"""
    def _make(**kwargs):
        return create_user(db_session, **kwargs)
    return _make


@pytest.fixture
def headers_for():
    return bearer_headers
