from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sender(str, Enum):
    """Author of a transcript message."""

    USER = "user"
    BOT = "bot"


class SessionPhase(str, Enum):
    """Lifecycle phase of the current request."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


class Message(BaseModel):
    """A single message in the conversation transcript.

    Attributes:
        text: The message text.
        sender: Who wrote the message (user or bot).
    """

    model_config = ConfigDict(frozen=True)

    text: str
    sender: Sender


class ProcessStep(BaseModel):
    """One named phase of the backend pipeline.

    Attributes:
        name: Unique step name reported by the backend.
        completed: Whether the backend has reported the step as done.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    completed: bool = False


class StepCompleted(BaseModel):
    """The backend finished the named processing step."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["step_completed"] = "step_completed"
    name: str


class QueryGenerated(BaseModel):
    """The backend produced its search query."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["query_generated"] = "query_generated"
    query: str


class SearchResults(BaseModel):
    """The backend returned search results (opaque payload)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["search_results"] = "search_results"
    results: Any


class TextDelta(BaseModel):
    """An incremental fragment of the answer text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text_delta"] = "text_delta"
    text: str


class Malformed(BaseModel):
    """A marked line whose payload could not be decoded."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["malformed"] = "malformed"
    raw: str


StreamEvent = Annotated[
    StepCompleted | QueryGenerated | SearchResults | TextDelta | Malformed,
    Field(discriminator="kind"),
]


class SessionState(BaseModel):
    """Immutable snapshot of everything the UI renders.

    Every reconciler step returns a new snapshot; slices that did not
    change keep their identity so observers can compare by reference.

    Attributes:
        transcript: Ordered conversation messages.
        steps: Progress of the backend step pipeline.
        query: Generated query reported by the backend.
        search_results: Search results reported by the backend.
        answer: Running buffer of the in-flight answer.
        answer_started: Whether the bot message for this answer was pushed.
        phase: Lifecycle phase of the current request.
        malformed_count: Undecodable payloads seen in the current request.
        version: Incremented on every change.
    """

    model_config = ConfigDict(frozen=True)

    transcript: tuple[Message, ...] = ()
    steps: tuple[ProcessStep, ...] = ()
    query: str = ""
    search_results: Any = None
    answer: str = ""
    answer_started: bool = False
    phase: SessionPhase = SessionPhase.IDLE
    malformed_count: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0)

    @property
    def is_loading(self) -> bool:
        """True while a request is streaming."""
        return self.phase is SessionPhase.STREAMING

    @property
    def current_step_index(self) -> int:
        """Index of the first incomplete step, or the last step when all are done."""
        for index, step in enumerate(self.steps):
            if not step.completed:
                return index
        return len(self.steps) - 1


class ChatRequest(BaseModel):
    """Request payload for the streaming chat endpoint.

    Attributes:
        question: The user's latest question.
        history: Full transcript including the latest question.
    """

    question: str = Field(..., min_length=1)
    history: list[Message] = Field(default_factory=list)

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v: str) -> str:
        """Strip whitespace from question before validation."""
        if isinstance(v, str):
            return v.strip()
        return v
