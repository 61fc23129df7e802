"""Unit tests for the chat page display helpers."""

import pytest_check as check

from chatstream.config import ClientConfig
from chatstream.models.schemas import QueryGenerated, SearchResults
from chatstream.streaming import reconciler
from chatstream.ui.chat_page import step_details

STEPS = ["受付", "検索計画", "検索", "回答"]


class TestStepDetails:
    """Tests for step_details."""

    def test_details_follow_configured_step_names(self) -> None:
        """Query and results attach to the configured steps, not the defaults."""
        config = ClientConfig(process_steps=STEPS)
        state = reconciler.start(reconciler.initial_state(STEPS), "q?")
        state = reconciler.apply(state, QueryGenerated(query="search(text='q')"))
        state = reconciler.apply(state, SearchResults(results=[{"id": "skills"}]))

        details = [step_details(config, state, step) for step in state.steps]

        check.equal(details[1], "search(text='q')")
        check.is_in('"skills"', details[2])
        check.is_none(details[0])
        check.is_none(details[3])
