"""Unit tests for the stream reconciler state fold."""

import pytest
import pytest_check as check

from chatstream.config import DEFAULT_PROCESS_STEPS, ERROR_NOTICE, INTERRUPTED_NOTICE
from chatstream.models.schemas import (
    Malformed,
    Message,
    QueryGenerated,
    SearchResults,
    Sender,
    SessionPhase,
    SessionState,
    StepCompleted,
    TextDelta,
)
from chatstream.streaming import reconciler

RECEIVED, QUERY, SEARCH, RESPONSE = DEFAULT_PROCESS_STEPS


@pytest.fixture
def streaming() -> SessionState:
    """State right after the question 'skills?' was sent."""
    return reconciler.start(reconciler.initial_state(DEFAULT_PROCESS_STEPS), "skills?")


def completed_flags(state: SessionState) -> list[bool]:
    return [step.completed for step in state.steps]


class TestStart:
    """Tests for the Idle -> Streaming transition."""

    def test_appends_user_message_and_streams(self, streaming: SessionState) -> None:
        """The question becomes the transcript tail and loading starts."""
        check.equal(streaming.transcript, (Message(text="skills?", sender=Sender.USER),))
        check.equal(streaming.phase, SessionPhase.STREAMING)
        check.is_true(streaming.is_loading)

    def test_resets_progress_and_diagnostics(self, streaming: SessionState) -> None:
        """Steps, query, results and answer buffer are cleared per request."""
        state = reconciler.apply(streaming, StepCompleted(name=QUERY))
        state = reconciler.apply(state, QueryGenerated(query="q"))
        state = reconciler.apply(state, SearchResults(results=[1]))
        state = reconciler.apply(state, TextDelta(text="old"))
        state = reconciler.finish(state, SessionPhase.COMPLETED)

        restarted = reconciler.start(state, "next?")

        check.equal(completed_flags(restarted), [False] * 4)
        check.equal(restarted.query, "")
        check.is_none(restarted.search_results)
        check.equal(restarted.answer, "")
        check.is_false(restarted.answer_started)
        check.equal(len(restarted.transcript), 3)


class TestSteps:
    """Tests for StepCompleted events."""

    def test_marks_only_named_step(self, streaming: SessionState) -> None:
        """One completion leaves the other steps untouched."""
        state = reconciler.apply(streaming, StepCompleted(name=QUERY))

        check.equal(completed_flags(state), [False, True, False, False])
        check.is_(state.steps[0], streaming.steps[0])

    def test_current_step_points_at_first_incomplete(self, streaming: SessionState) -> None:
        """With one step done the pointer moves to the next incomplete one."""
        state = reconciler.apply(streaming, StepCompleted(name=RECEIVED))

        assert state.current_step_index == 1

    def test_current_step_after_out_of_order_completion(self, streaming: SessionState) -> None:
        """Completing a later step does not move the pointer past earlier ones."""
        state = reconciler.apply(streaming, StepCompleted(name=QUERY))

        assert state.current_step_index == 0

    def test_current_step_is_last_when_all_done(self, streaming: SessionState) -> None:
        """The pointer stays on the last step once everything is complete."""
        state = streaming
        for name in DEFAULT_PROCESS_STEPS:
            state = reconciler.apply(state, StepCompleted(name=name))

        assert state.current_step_index == 3

    def test_unknown_step_is_ignored(self, streaming: SessionState) -> None:
        """An unknown name returns the very same state."""
        assert reconciler.apply(streaming, StepCompleted(name="unknown")) is streaming

    def test_repeated_completion_is_noop(self, streaming: SessionState) -> None:
        """Completion is monotonic; repeating it changes nothing."""
        state = reconciler.apply(streaming, StepCompleted(name=SEARCH))

        assert reconciler.apply(state, StepCompleted(name=SEARCH)) is state


class TestDiagnostics:
    """Tests for query and search result events."""

    def test_query_and_results_stored_verbatim(self, streaming: SessionState) -> None:
        """Auxiliary state is stored without touching transcript or steps."""
        results = {"hits": [{"id": "a"}]}
        state = reconciler.apply(streaming, QueryGenerated(query="SELECT *"))
        state = reconciler.apply(state, SearchResults(results=results))

        check.equal(state.query, "SELECT *")
        check.equal(state.search_results, results)
        check.is_(state.transcript, streaming.transcript)
        check.is_(state.steps, streaming.steps)


class TestTextDeltas:
    """Tests for the append-then-replace answer semantics."""

    def test_first_delta_pushes_bot_message(self, streaming: SessionState) -> None:
        """The first delta adds one bot message with its text."""
        state = reconciler.apply(streaming, TextDelta(text="Go"))

        check.equal(len(state.transcript), 2)
        check.equal(state.transcript[-1], Message(text="Go", sender=Sender.BOT))
        check.is_true(state.answer_started)

    def test_deltas_concatenate_into_single_message(self, streaming: SessionState) -> None:
        """N deltas produce exactly one bot message with their concatenation."""
        parts = ["Go", "od", " at", " Ru", "st."]
        state = streaming
        for part in parts:
            state = reconciler.apply(state, TextDelta(text=part))

        bot_messages = [m for m in state.transcript if m.sender is Sender.BOT]
        check.equal(len(bot_messages), 1)
        check.equal(bot_messages[0].text, "".join(parts))
        check.equal(state.answer, "".join(parts))

    def test_tail_is_replaced_not_mutated(self, streaming: SessionState) -> None:
        """Each delta swaps in a new Message and a new transcript tuple."""
        first = reconciler.apply(streaming, TextDelta(text="a"))
        second = reconciler.apply(first, TextDelta(text="b"))

        check.is_not(second.transcript, first.transcript)
        check.is_not(second.transcript[-1], first.transcript[-1])
        check.equal(first.transcript[-1].text, "a")
        check.is_(second.transcript[0], first.transcript[0])
        check.is_(second.steps, first.steps)

    def test_version_increases_on_every_change(self, streaming: SessionState) -> None:
        """Observers can detect change from the version counter."""
        state = reconciler.apply(streaming, TextDelta(text="a"))

        assert state.version == streaming.version + 1

    def test_malformed_payload_is_appended_as_text(self, streaming: SessionState) -> None:
        """Raw text of a malformed payload joins the answer and is counted."""
        state = reconciler.apply(streaming, TextDelta(text="Hello "))
        state = reconciler.apply(state, Malformed(raw="{broken"))

        check.equal(state.transcript[-1].text, "Hello {broken")
        check.equal(state.malformed_count, 1)

    def test_events_after_finish_are_ignored(self, streaming: SessionState) -> None:
        """A finished request no longer accepts events."""
        done = reconciler.finish(streaming, SessionPhase.COMPLETED)

        assert reconciler.apply(done, TextDelta(text="late")) is done


class TestFinish:
    """Tests for terminal transitions."""

    def test_completed_leaves_transcript(self, streaming: SessionState) -> None:
        """Normal end only clears the loading flag."""
        state = reconciler.apply(streaming, TextDelta(text="answer"))
        done = reconciler.finish(state, SessionPhase.COMPLETED)

        check.is_(done.transcript, state.transcript)
        check.is_false(done.is_loading)
        check.equal(done.phase, SessionPhase.COMPLETED)

    def test_abort_before_any_delta_adds_notice_only(self, streaming: SessionState) -> None:
        """No content is lost and exactly one notice is appended."""
        done = reconciler.finish(streaming, SessionPhase.ABORTED)

        check.equal(
            done.transcript,
            (
                Message(text="skills?", sender=Sender.USER),
                Message(text=INTERRUPTED_NOTICE, sender=Sender.BOT),
            ),
        )
        check.is_false(done.is_loading)

    def test_abort_after_delta_keeps_partial_answer(self, streaming: SessionState) -> None:
        """The partial answer stays, followed by a separate notice."""
        state = reconciler.apply(streaming, TextDelta(text="Part"))
        done = reconciler.finish(state, SessionPhase.ABORTED)

        check.equal([m.text for m in done.transcript], ["skills?", "Part", INTERRUPTED_NOTICE])

    def test_abort_removes_empty_bot_message(self, streaming: SessionState) -> None:
        """A bot message that only received empty text is dropped."""
        state = reconciler.apply(streaming, TextDelta(text=""))
        done = reconciler.finish(state, SessionPhase.ABORTED)

        check.equal([m.text for m in done.transcript], ["skills?", INTERRUPTED_NOTICE])

    def test_failure_appends_error_notice(self, streaming: SessionState) -> None:
        """Transport failure appends the error notice."""
        done = reconciler.finish(streaming, SessionPhase.FAILED)

        check.equal(done.transcript[-1], Message(text=ERROR_NOTICE, sender=Sender.BOT))
        check.equal(done.phase, SessionPhase.FAILED)
        check.is_false(done.is_loading)

    def test_custom_notice_texts(self, streaming: SessionState) -> None:
        """Notice texts can be overridden."""
        done = reconciler.finish(streaming, SessionPhase.FAILED, error_notice="boom")

        assert done.transcript[-1].text == "boom"

    def test_rejects_non_terminal_outcome(self, streaming: SessionState) -> None:
        """Only terminal phases may finish a request."""
        with pytest.raises(ValueError, match="Not a terminal phase"):
            reconciler.finish(streaming, SessionPhase.STREAMING)

    def test_finish_outside_streaming_is_noop(self) -> None:
        """Finishing an idle state changes nothing."""
        idle = reconciler.initial_state(DEFAULT_PROCESS_STEPS)

        assert reconciler.finish(idle, SessionPhase.ABORTED) is idle


class TestReplay:
    """Tests for the fold as a whole."""

    EVENTS = [
        StepCompleted(name=RECEIVED),
        TextDelta(text="Go"),
        TextDelta(text="od at"),
        TextDelta(text=" Rust."),
        StepCompleted(name=RESPONSE),
    ]

    def test_example_conversation(self) -> None:
        """The documented example ends with the full answer and two steps done."""
        state = reconciler.replay(DEFAULT_PROCESS_STEPS, "skills?", self.EVENTS)

        check.equal(state.transcript[-1], Message(text="Good at Rust.", sender=Sender.BOT))
        check.equal(completed_flags(state), [True, False, False, True])
        check.is_false(state.is_loading)

    def test_replay_is_deterministic(self) -> None:
        """The same sequence always folds to an identical state."""
        events = [*self.EVENTS, QueryGenerated(query="q"), Malformed(raw="!")]

        first = reconciler.replay(DEFAULT_PROCESS_STEPS, "skills?", events, SessionPhase.ABORTED)
        second = reconciler.replay(DEFAULT_PROCESS_STEPS, "skills?", events, SessionPhase.ABORTED)

        assert first == second
