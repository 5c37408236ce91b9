import os
import tempfile

# Must be set before the app module reads its config.
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "testing"
os.environ["OPENAI_API_KEY"] = ""
os.environ["DASHBOARD_PASSWORD"] = "Ben$2025"
for _name in ("DASHBOARD_PASSWORD_HASH", "OPENAI_MODEL", "AI_TEMPERATURE", "AI_MAX_TOKENS", "IMAGE_MODEL", "TURN_LOG_FILE"):
    os.environ.pop(_name, None)
os.environ.setdefault("STATIC_DIR", tempfile.mkdtemp(prefix="dealership-static-"))
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="dealership-logs-"))

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from dealership.app import app


def completion(*texts):
    """Shape of an OpenAI chat completion with one choice per text."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=t)) for t in texts])


@pytest.fixture
def client():
    """Create a test client for the Flask app."""
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def openai_client():
    """Stand-in OpenAI client; tests set .chat.completions.create / .images.generate behaviour."""
    fake = MagicMock()
    with patch("dealership.ai_client.get_client", return_value=fake):
        yield fake


@pytest.fixture
def no_openai():
    with patch("dealership.ai_client.get_client", return_value=None):
        yield


@pytest.fixture
def logged_in(client):
    r = client.post("/api/auth/login", json={"username": "bdavis", "password": "Ben$2025"})
    assert r.status_code == 200
    return client
