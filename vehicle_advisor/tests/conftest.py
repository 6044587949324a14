from __future__ import annotations

import os

# Keep tests offline regardless of a developer's .env
os.environ["LLM_ENABLED"] = "false"

import pytest  # noqa: E402

from vehicle_advisor.analytics.store import clear_events  # noqa: E402
from vehicle_advisor.chat.conversations import clear_conversations  # noqa: E402
from vehicle_advisor.chat.state import clear_state  # noqa: E402
from vehicle_advisor.preferences.store import clear_preferences  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_stores():
    clear_state()
    clear_preferences()
    clear_events()
    clear_conversations()
    yield
