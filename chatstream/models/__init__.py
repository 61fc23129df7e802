"""Pydantic models for the chat transcript, stream events and session state.

Provides immutable snapshots that observers can compare by identity.

Models:
    - Message: Individual message in the transcript
    - ProcessStep: One entry of the backend step pipeline
    - StreamEvent: Classified event decoded from the response stream
    - SessionState: Snapshot of transcript, steps and diagnostics
    - ChatRequest: Outgoing request payload
"""

from chatstream.models.schemas import (
    ChatRequest,
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

__all__ = [
    "ChatRequest",
    "Malformed",
    "Message",
    "ProcessStep",
    "QueryGenerated",
    "SearchResults",
    "Sender",
    "SessionPhase",
    "SessionState",
    "StepCompleted",
    "StreamEvent",
    "TextDelta",
]
