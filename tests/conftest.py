import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_finxpress.db")

from datetime import timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from database import Base, get_db
from models.otp_code import OtpCode
from services.errors import DeliveryError
from api.otp import get_email_sender
from app import app

# Use a test database URL (set this in your environment or hardcode for local dev)
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite:///./test_otp.db")
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False} if TEST_DATABASE_URL.startswith("sqlite") else {})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeEmailSender:
    """Records submitted codes instead of calling the email API."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_otp(self, to_email, code):
        if self.fail:
            raise DeliveryError()
        self.sent.append((to_email, code))
        return f"msg_{len(self.sent)}"

    @property
    def last_code(self):
        return self.sent[-1][1]


def as_utc(dt):
    # SQLite hands timestamps back without tzinfo
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSessionLocal()
    db.query(OtpCode).delete()
    db.commit()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sender():
    return FakeEmailSender()


@pytest.fixture
def client(db, sender):
    def override_get_db():
        yield db
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: sender
    yield TestClient(app)
    app.dependency_overrides = {}
