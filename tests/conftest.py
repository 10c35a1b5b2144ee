import os

# Must be set before app modules read them at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers ExchangeRate on Base
from app.database import Base, get_db


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    from app.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def fx_response(from_currency: str, rates: dict, rate_date: date | None = None, status_code: int = 200):
    """Build an exchangerate-api style response for patching httpx.get."""
    payload = {"base": from_currency, "rates": rates}
    if rate_date is not None:
        payload["date"] = rate_date.isoformat()
    return httpx.Response(
        status_code,
        json=payload,
        request=httpx.Request("GET", f"https://fx.test/{from_currency}"),
    )


class FakeReceiptExtractor:
    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls = []

    async def extract_text(self, image_bytes: bytes, content_type: str) -> str:
        self.calls.append((image_bytes, content_type))
        if self.error is not None:
            raise self.error
        return self.text
