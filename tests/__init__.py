"""Test package for chatstream.

Structure:
    - unit/: Framer, parser, reconciler and config tests
    - integration/: SessionController against scripted transports and the demo backend

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
