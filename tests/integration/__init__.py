"""Integration tests for the full request/response cycle.

No network access - responses come from httpx.MockTransport scripts or
the demo FastAPI app through ASGITransport.
"""
