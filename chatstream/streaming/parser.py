"""Classify framed lines into stream events."""

import json
import logging

from chatstream.models.schemas import (
    Malformed,
    QueryGenerated,
    SearchResults,
    StepCompleted,
    StreamEvent,
    TextDelta,
)

logger = logging.getLogger(__name__)

EVENT_PREFIX = "data: "


def parse_line(line: str) -> StreamEvent | None:
    """Turn one framed line into a stream event.

    Lines without the ``data: `` marker are ignored. When a payload carries
    several recognized keys, the first match wins in the order
    ``process_step``, ``generated_query``, ``search_results``, ``text``.

    Args:
        line: A complete line without its trailing newline.

    Returns:
        The classified event, or None if the line carries nothing to apply.
    """
    if not line.startswith(EVENT_PREFIX):
        return None

    raw = line[len(EVENT_PREFIX):]
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Undecodable stream payload passed through as text: {raw[:80]!r}")
        return Malformed(raw=raw)

    if not isinstance(data, dict):
        logger.debug(f"Ignoring non-object payload: {raw[:80]!r}")
        return None

    if (step := data.get("process_step")) is not None:
        return StepCompleted(name=str(step))
    if (query := data.get("generated_query")) is not None:
        return QueryGenerated(query=str(query))
    if (results := data.get("search_results")) is not None:
        return SearchResults(results=results)
    if (text := data.get("text")) is not None:
        return TextDelta(text=str(text))

    logger.debug(f"Ignoring payload without recognized keys: {sorted(data)}")
    return None
