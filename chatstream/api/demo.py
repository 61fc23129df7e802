"""Scripted streaming chat endpoint.

Walks through the backend step pipeline and emits one ``data:`` line per
event, in the same shape the real question-answering service uses.
"""

import asyncio
import json
import logging
import os
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from chatstream.config import get_client_config
from chatstream.models.schemas import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

# Seconds between emitted events
EVENT_DELAY = float(os.getenv("DEMO_EVENT_DELAY", "0.05"))
DELTA_SIZE = 8

DEMO_DOCUMENTS: list[dict[str, str]] = [
    {"id": "skills", "keyword": "スキル", "content": "Python, TypeScript, Rust を用いた開発経験があります。"},
    {"id": "education", "keyword": "学歴", "content": "情報工学を専攻し、自然言語処理を研究しました。"},
    {"id": "career", "keyword": "仕事", "content": "検索システムとチャットボットの開発に携わってきました。"},
    {"id": "strengths", "keyword": "強み", "content": "設計から運用まで一貫して担当できることが強みです。"},
]


def format_event(payload: dict[str, Any]) -> str:
    """Encode one payload as a ``data:`` frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def search_documents(question: str) -> list[dict[str, str]]:
    """Return demo documents whose keyword appears in the question.

    Falls back to the first two documents when nothing matches.
    """
    hits = [doc for doc in DEMO_DOCUMENTS if doc["keyword"] in question]
    return hits or DEMO_DOCUMENTS[:2]


def compose_answer(question: str, results: list[dict[str, str]]) -> str:
    """Build the demo answer from the matched documents."""
    lines = [f"「{question}」についての回答です。", ""]
    lines.extend(f"- {doc['content']}" for doc in results)
    return "\n".join(lines)


def split_deltas(text: str, size: int = DELTA_SIZE) -> list[str]:
    """Cut the answer into fixed-size text deltas."""
    return [text[i : i + size] for i in range(0, len(text), size)]


async def generate_events(
    request: ChatRequest, step_names: list[str]
) -> AsyncGenerator[str, None]:
    """Yield the full event sequence for one question.

    Steps complete in order: the first on receipt, the next two after the
    query and the search results, and the rest once the answer is written.
    """
    remaining = list(step_names)

    def complete_next() -> list[str]:
        # The last step is held back until the answer is done
        if len(remaining) < 2:
            return []
        return [format_event({"process_step": remaining.pop(0)})]

    async def pause() -> None:
        if EVENT_DELAY > 0:
            await asyncio.sleep(EVENT_DELAY)

    for event in complete_next():
        yield event
    await pause()

    query = f'search(text="{request.question}", limit=3)'
    yield format_event({"generated_query": query})
    for event in complete_next():
        yield event
    await pause()

    results = search_documents(request.question)
    yield format_event({"search_results": results})
    for event in complete_next():
        yield event
    await pause()

    for delta in split_deltas(compose_answer(request.question, results)):
        yield format_event({"text": delta})
        await pause()

    for name in remaining:
        yield format_event({"process_step": name})


@router.post("/chat")
async def chat(request: ChatRequest) -> StreamingResponse:
    """Stream a scripted answer for the question.

    Args:
        request: Question and prior transcript.

    Returns:
        ``text/event-stream`` response of ``data:`` frames.
    """
    logger.info(
        f"Demo chat request ({len(request.history)} history messages): {request.question[:50]!r}"
    )
    return StreamingResponse(
        generate_events(request, get_client_config().process_steps),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
