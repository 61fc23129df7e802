"""Demo backend emitting the chat event stream protocol.

A scripted stand-in for the remote question-answering service, used for
local development and integration tests. It performs no real query
generation or search.

Endpoints:
    - GET /health: Service health status
    - POST /chat: Streamed answer as ``data: {...}`` lines
"""
