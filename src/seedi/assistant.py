"""
Assistant Grounding

Builds the system prompt that grounds the conversational assistant in
the knowledge base, and decodes the assistant's server-sent event stream.
The model call itself lives outside this package.

Stream frames are ``data: <json>`` lines:
    {"content": "..."}   incremental text
    {"done": true}       end of stream
    {"error": "..."}     failure reported by the server
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator, Sequence
from typing import Any

from seedi.catalog.knowledge_base import KnowledgeBaseFilters, KnowledgeBaseRecord, query, stats
from seedi.core.exceptions import AssistantStreamError, ValidationError
from seedi.core.schemas import UserContext

logger = logging.getLogger(__name__)

MAX_GROUNDING_RECORDS = 3
GROUNDING_QUERY_LIMIT = 5

_GUIDELINES = """Guidelines:
- Always be helpful and provide substantive answers about agriculture, food systems, sustainability, and innovation.
- Keep responses concise (2-4 short paragraphs).
- Reference specific innovations from the knowledge base when relevant.
- Provide practical, actionable advice.
- You may discuss SDGs, climate adaptation, post-harvest management, irrigation, soil health, pest management, and all agricultural topics."""


def describe_context(context: UserContext | str | None) -> str:
    """One-line description of the user's situation for the prompt."""
    if context is None:
        return ""
    if isinstance(context, str):
        return context.strip()
    parts = [
        ("Role", context.role),
        ("Objective", context.primary_objective),
        ("Region", context.region),
        ("Crop", context.primary_crop),
        ("Agro-ecological zone", context.agro_ecological_zone),
        ("Budget", context.budget_level),
        ("Farm size", context.farm_size),
        ("Climate risk", context.climate_risk_level),
    ]
    return "; ".join(f"{label}: {value}" for label, value in parts if value)


def build_assistant_prompt(
    question: str,
    records: Sequence[KnowledgeBaseRecord],
    user_context: UserContext | str | None = None,
) -> str:
    """
    System prompt for one assistant question.

    Args:
        question: The user's question; also used as the knowledge base search.
        records: Knowledge base to ground against.
        user_context: Optional context to mention in the prompt.

    Raises:
        ValidationError: The question is blank.
    """
    if not question or not question.strip():
        raise ValidationError("Question is required")

    kb = stats(records).to_dict()
    matches = query(
        records, KnowledgeBaseFilters(search=question.strip()), page=1, limit=GROUNDING_QUERY_LIMIT
    )
    grounded = matches.data[:MAX_GROUNDING_RECORDS]
    grounding = "\n".join(
        f"- {r.title} ({r.type or 'Innovation'}): {r.summary or 'Agricultural innovation'}"
        for r in grounded
    )

    sections = [
        "You are SEEDi AI, a knowledgeable and helpful agricultural innovation advisor. "
        "You assist farmers, policymakers, investors, researchers, and SMEs in discovering "
        "agricultural innovations suited to their unique situation.",
        f"You draw from the ATIO Knowledge Base containing {kb['totalInnovations']} innovations "
        f"across {kb['totalCountries']}+ countries aligned with {kb['totalSdgs']} "
        "Sustainable Development Goals.",
    ]
    if grounding:
        sections.append(f"Relevant innovations from the database:\n{grounding}")
    context_line = describe_context(user_context)
    if context_line:
        sections.append(f"User's current context: {context_line}")
    sections.append(_GUIDELINES)

    logger.debug("Assistant prompt grounded on %d record(s)", len(grounded))
    return "\n\n".join(sections)


def _parse_frame(line: str) -> dict[str, Any] | None:
    """Decode one SSE line; None for blank lines, comments and non-data fields."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[len("data:") :].strip()
    if not payload:
        return None
    try:
        frame = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("Skipping undecodable stream frame: %.80s", payload)
        return None
    return frame if isinstance(frame, dict) else None


def _content(frame: dict[str, Any]) -> str | None:
    """Text carried by a frame; None once the stream is over. Raises on error frames."""
    if frame.get("error"):
        raise AssistantStreamError(str(frame["error"]))
    if frame.get("done"):
        return None
    return frame.get("content") or ""


def iter_stream_chunks(lines: Iterable[str]) -> Iterator[str]:
    """
    Yield text chunks from an assistant event stream.

    Stops at the ``done`` frame; lines after it are not read.

    Raises:
        AssistantStreamError: The stream carried an error frame.
    """
    for line in lines:
        frame = _parse_frame(line)
        if frame is None:
            continue
        content = _content(frame)
        if content is None:
            return
        if content:
            yield content


async def aiter_stream_chunks(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Async counterpart of ``iter_stream_chunks`` (e.g. for ``httpx.Response.aiter_lines()``)."""
    async for line in lines:
        frame = _parse_frame(line)
        if frame is None:
            continue
        content = _content(frame)
        if content is None:
            return
        if content:
            yield content
