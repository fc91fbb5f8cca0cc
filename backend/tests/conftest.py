from __future__ import annotations

import pytest

from app.core.config import settings
from app.services.avatar_overlay import clear_current_user_avatar_data

API_BASE_URL = "http://localhost:3000"


@pytest.fixture(autouse=True)
def pinned_settings(monkeypatch):
    monkeypatch.setattr(settings, "API_BASE_URL", API_BASE_URL)
    monkeypatch.setattr(settings, "DISCORD_CDN_BASE_URL", "https://cdn.discordapp.com")
    return settings


@pytest.fixture(autouse=True)
def reset_current_user_overlay():
    clear_current_user_avatar_data()
    yield
    clear_current_user_avatar_data()
