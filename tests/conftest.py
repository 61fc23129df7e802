"""Pytest fixtures and shared test configuration.

Fixtures:
    - config: Client configuration pointing at a fake host
    - no_demo_delay: Removes pauses from the demo backend (autouse)
"""

import pytest

from chatstream.config import DEFAULT_PROCESS_STEPS, ClientConfig


@pytest.fixture
def config() -> ClientConfig:
    """Client configuration with the default step pipeline.

    Returns:
        ClientConfig aimed at http://test/chat.
    """
    return ClientConfig(
        api_base_url="http://test",
        chat_path="/chat",
        process_steps=list(DEFAULT_PROCESS_STEPS),
    )


@pytest.fixture(autouse=True)
def no_demo_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the demo backend without pauses between events."""
    monkeypatch.setattr("chatstream.api.demo.EVENT_DELAY", 0.0)
