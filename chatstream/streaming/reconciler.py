"""Pure state fold from stream events to session snapshots.

Every function takes a frozen SessionState and returns a new one. Slices
that a transition does not touch are carried over by reference, and the
transcript tail is replaced with a new Message rather than edited.
"""

import logging
from collections.abc import Iterable, Sequence

from chatstream.config import ERROR_NOTICE, INTERRUPTED_NOTICE
from chatstream.models.schemas import (
    Malformed,
    Message,
    ProcessStep,
    QueryGenerated,
    SearchResults,
    Sender,
    SessionPhase,
    SessionState,
    StepCompleted,
    StreamEvent,
    TextDelta,
)

logger = logging.getLogger(__name__)

TERMINAL_PHASES = frozenset(
    {SessionPhase.COMPLETED, SessionPhase.ABORTED, SessionPhase.FAILED}
)


def _evolve(state: SessionState, **changes: object) -> SessionState:
    return state.model_copy(update={**changes, "version": state.version + 1})


def initial_state(step_names: Sequence[str]) -> SessionState:
    """Idle state with every step incomplete and an empty transcript."""
    return SessionState(steps=tuple(ProcessStep(name=name) for name in step_names))


def start(state: SessionState, question: str) -> SessionState:
    """Begin a request: reset progress and diagnostics, append the question."""
    return _evolve(
        state,
        transcript=(*state.transcript, Message(text=question, sender=Sender.USER)),
        steps=tuple(ProcessStep(name=step.name) for step in state.steps),
        query="",
        search_results=None,
        answer="",
        answer_started=False,
        phase=SessionPhase.STREAMING,
        malformed_count=0,
    )


def _append_delta(state: SessionState, text: str, **extra: object) -> SessionState:
    answer = state.answer + text
    message = Message(text=answer, sender=Sender.BOT)
    if state.answer_started:
        transcript = (*state.transcript[:-1], message)
    else:
        transcript = (*state.transcript, message)
    return _evolve(
        state, transcript=transcript, answer=answer, answer_started=True, **extra
    )


def apply(state: SessionState, event: StreamEvent) -> SessionState:
    """Fold one event into the state.

    Events arriving outside the streaming phase are ignored, as are
    completions of steps that are not part of the pipeline.
    """
    if state.phase is not SessionPhase.STREAMING:
        logger.debug(f"Ignoring {event.kind} event in phase {state.phase.value}")
        return state

    if isinstance(event, StepCompleted):
        matched = [step for step in state.steps if step.name == event.name]
        if not matched:
            logger.debug(f"Ignoring unknown process step: {event.name!r}")
            return state
        if matched[0].completed:
            return state
        steps = tuple(
            ProcessStep(name=step.name, completed=True) if step.name == event.name else step
            for step in state.steps
        )
        return _evolve(state, steps=steps)

    if isinstance(event, QueryGenerated):
        return _evolve(state, query=event.query)

    if isinstance(event, SearchResults):
        return _evolve(state, search_results=event.results)

    if isinstance(event, TextDelta):
        return _append_delta(state, event.text)

    if isinstance(event, Malformed):
        return _append_delta(
            state, event.raw, malformed_count=state.malformed_count + 1
        )

    raise TypeError(f"Unsupported stream event: {event!r}")


def finish(
    state: SessionState,
    outcome: SessionPhase,
    *,
    interrupted_notice: str = INTERRUPTED_NOTICE,
    error_notice: str = ERROR_NOTICE,
) -> SessionState:
    """Apply the terminal condition of a request.

    Args:
        state: State of the streaming request.
        outcome: One of COMPLETED, ABORTED or FAILED.
        interrupted_notice: Text appended on abort.
        error_notice: Text appended on failure.

    Returns:
        The finalized state, no longer loading.
    """
    if outcome not in TERMINAL_PHASES:
        raise ValueError(f"Not a terminal phase: {outcome.value}")
    if state.phase is not SessionPhase.STREAMING:
        return state

    transcript = state.transcript
    if outcome is SessionPhase.ABORTED:
        tail = transcript[-1] if transcript else None
        if (
            state.answer_started
            and tail is not None
            and tail.sender is Sender.BOT
            and not tail.text.strip()
        ):
            transcript = transcript[:-1]
        transcript = (*transcript, Message(text=interrupted_notice, sender=Sender.BOT))
    elif outcome is SessionPhase.FAILED:
        transcript = (*transcript, Message(text=error_notice, sender=Sender.BOT))

    return _evolve(state, transcript=transcript, phase=outcome)


def replay(
    step_names: Sequence[str],
    question: str,
    events: Iterable[StreamEvent],
    outcome: SessionPhase = SessionPhase.COMPLETED,
) -> SessionState:
    """Run a whole request against a fresh state and return the result."""
    state = start(initial_state(step_names), question)
    for event in events:
        state = apply(state, event)
    return finish(state, outcome)
