"""
Global test fixtures for the Yelstar offer service.

Creates an isolated Flask app with a stub completion client so tests
never hit the OpenAI API.
"""

from __future__ import annotations
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# ---------------------------------------------------------------------------
# Import target app
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import create_app  # type: ignore  # noqa: E402
from app.config import load_settings  # type: ignore  # noqa: E402
from connectors.openai_client import CompletionError  # type: ignore  # noqa: E402

OFFER_MODEL = "gpt-4"
ENHANCE_MODEL = "gpt-3.5-turbo"


class FakeCompletions:
    """
    Stub for connectors.openai_client.CompletionClient.

    - Enhancement calls echo the quoted input back.
    - Offer / ad calls return `reply`.
    - Models listed in `fail_models` raise CompletionError.
    """

    def __init__(self, reply: str = "", fail_models=()):
        self.reply = reply
        self.fail_models = set(fail_models)
        self.calls: List[Dict[str, Any]] = []

    def complete(self, system, user, *, model=None, temperature=0.5, max_tokens=200) -> str:
        self.calls.append({
            "system": system,
            "user": user,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if model in self.fail_models:
            raise CompletionError(f"{model} unavailable")
        if model == ENHANCE_MODEL:
            return user.rsplit("\n", 1)[-1].strip().strip('"')
        return self.reply

    def calls_for(self, model: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["model"] == model]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def config_override(tmp_path: Path) -> Dict[str, Any]:
    return {
        "SECRET_KEY": "test-secret",
        "OPENAI_API_KEY": None,
        "OPENAI_MODEL": OFFER_MODEL,
        "ENHANCE_MODEL": ENHANCE_MODEL,
        "FF_ENHANCE_INPUTS": "0",
        "LOG_DIR": str(tmp_path / "logs"),
    }


@pytest.fixture()
def settings(config_override):
    return load_settings(config_override)


@pytest.fixture()
def make_fake():
    return FakeCompletions


@pytest.fixture()
def fake():
    return FakeCompletions(reply="تخفیف ۵۰٪ قهوه\nفقط تا ۷ June 2024")


@pytest.fixture()
def app(config_override, fake):
    """Flask app fixture (testing mode ON) with the stub completion client."""
    flask_app = create_app(config_override, completions=fake)
    flask_app.config.update(TESTING=True)
    yield flask_app


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def offer_payload() -> Dict[str, Optional[str]]:
    return {
        "goal": "weekend sales",
        "discountType": "20% off",
        "productOrService": "coffee",
        "category": "cafe",
        "startDate": "2024-06-01",
        "endDate": "2024-06-07",
    }


@pytest.fixture()
def ad_payload() -> Dict[str, Any]:
    return {
        "title": "کافه ستاره",
        "description": "قهوه تازه دم هر روز صبح",
        "targetPage": "instagram",
        "imageDescription": "یک فنجان قهوه روی میز چوبی",
    }
