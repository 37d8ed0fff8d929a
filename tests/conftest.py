import os

# Settings are read at import time, so the environment is fixed up before any
# src module is imported. Existing values win over .env in load_dotenv.
os.environ["APP_ENV"] = "test"
os.environ["RECAPTCHA_SECRET"] = ""
os.environ["CAPTCHA_INSECURE_MODE"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "true"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["CONTACT_RATE_LIMIT"] = "10/minute"
os.environ["SMTP_HOST"] = "smtp.test.local"
os.environ["SMTP_FROM"] = "no-reply@jayprasad.com.np"
os.environ.pop("DEPARTMENT_EMAILS", None)

import pytest
from fastapi.testclient import TestClient

from src.common.rate_limit import limiter
from src.common.utils import email_service
from src.main import app


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def sent_messages(monkeypatch):
    """Capture messages handed to aiosmtplib instead of talking to a server."""
    outbox = []

    async def fake_send(message, **kwargs):
        outbox.append({"message": message, "options": kwargs})
        return {}, "250 OK"

    monkeypatch.setattr(email_service.aiosmtplib, "send", fake_send)
    return outbox


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def valid_form():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "department": "technical",
        "subject": "Server down",
        "message": "The website is not loading.",
    }
