from __future__ import annotations

import pytest

from tests.unit.fakes import RecordingAgent


@pytest.fixture()
def agent() -> RecordingAgent:
    return RecordingAgent()
