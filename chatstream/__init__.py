"""Chatstream - streaming chat front-end for a remote question-answering backend.

Combines httpx for the streaming transport, Pydantic for immutable session
state, NiceGUI for visualization, and FastAPI for a local demo backend.

Components:
    - streaming: transport reader, line framer, event parser, reconciler
    - session: request lifecycle and cancellation
    - ui: Web interface for chat interactions
    - api: Demo backend emitting the event stream protocol
    - models: Messages, events and session state
"""

__version__ = "0.1.0"
