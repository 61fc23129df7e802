"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Preset question cards for an empty conversation
    - Message display with streaming updates
    - Step-progress display with generated query and search results
    - Send, abort and reset controls

Contains no streaming logic. Re-renders from SessionController snapshots.
"""
