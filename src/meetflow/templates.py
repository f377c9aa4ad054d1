"""Smart templates -- meeting-derived emails, summaries, plans and reports.

generate_smart_template() asks a ChatCompleter for one of five document
types in a chosen tone and length, then post-processes the text (email
subject extraction, word count, reading time).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, Field

from meetflow.llm.protocols import ChatCompleter
from meetflow.prompts.templates import (
    LENGTH_INSTRUCTIONS,
    TEMPLATE_PROMPTS,
    TONE_INSTRUCTIONS,
    build_template_user_prompt,
)

TemplateType = Literal["email", "summary", "action_plan", "follow_up", "report"]
Tone = Literal["professional", "casual", "urgent", "friendly"]
Length = Literal["brief", "detailed", "comprehensive"]

WORDS_PER_MINUTE = 200


class TemplateContext(BaseModel):
    transcript: str = ""
    summary: str = ""
    participants: Optional[list[str]] = None
    meeting_type: Optional[str] = None
    custom_instructions: Optional[str] = None


class SmartTemplateRequest(BaseModel):
    """What to generate and how it should read."""

    type: TemplateType
    context: TemplateContext = Field(default_factory=TemplateContext)
    tone: Tone = "professional"
    length: Length = "detailed"


@dataclass(frozen=True)
class SmartTemplate:
    """Generated document plus simple reading metadata."""

    content: str
    subject: str | None
    word_count: int
    estimated_reading_time: int
    tone_analysis: str


def split_subject(content: str) -> tuple[str | None, str]:
    """Split a leading ``Subject:`` line from an email body.

    Returns ``(subject, body)``; subject is None when there is no such line.
    """
    lines = content.split("\n")
    for i, line in enumerate(lines):
        if line.startswith("Subject:"):
            subject = line[len("Subject:"):].strip()
            body = "\n".join(lines[i + 1:]).strip()
            return subject, body
    return None, content


def generate_smart_template(
    chat: ChatCompleter,
    request: SmartTemplateRequest,
    *,
    model: str | None = "gpt-4o",
) -> SmartTemplate:
    """Generate a document of ``request.type`` from meeting content.

    Args:
        chat: Text generation capability.
        request: Template type, meeting context, tone and length.
        model: Model passed to ``chat.complete()``.

    Returns:
        SmartTemplate.  For emails the subject line is split out.

    Raises:
        meetflow.llm.LLMClientError: If generation fails.
    """
    template = TEMPLATE_PROMPTS[request.type]
    system = " ".join(
        [
            template["system"],
            TONE_INSTRUCTIONS[request.tone],
            LENGTH_INSTRUCTIONS[request.length],
        ]
    )
    ctx = request.context
    user = build_template_user_prompt(
        request.type,
        summary=ctx.summary,
        transcript=ctx.transcript,
        participants=ctx.participants,
        meeting_type=ctx.meeting_type,
        custom_instructions=ctx.custom_instructions,
    )
    content = chat.complete(
        [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        model=model,
        temperature=0.3,
        max_tokens=2000,
    )

    subject: str | None = None
    body = content
    if request.type == "email" and "Subject:" in content:
        subject, body = split_subject(content)

    word_count = len(body.split())
    return SmartTemplate(
        content=body,
        subject=subject,
        word_count=word_count,
        estimated_reading_time=math.ceil(word_count / WORDS_PER_MINUTE),
        tone_analysis=request.tone,
    )
