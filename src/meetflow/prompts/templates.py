"""Prompts for smart template generation.

Each template type pairs a system prompt with a task instruction.  Tone
and length instructions are appended to the system prompt.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Template types
# ---------------------------------------------------------------------------

TEMPLATE_PROMPTS: dict[str, dict[str, str]] = {
    "email": {
        "system": (
            "You are an expert at writing professional emails based on meeting "
            "content. Create clear, actionable emails that summarize key points "
            "and next steps."
        ),
        "prompt": (
            "Generate a professional email based on this meeting content. "
            "Include a clear subject line and well-structured body."
        ),
    },
    "summary": {
        "system": (
            "You are an expert at creating executive summaries. Create concise, "
            "high-level summaries that highlight the most important information "
            "for leadership."
        ),
        "prompt": (
            "Create an executive summary that captures the key decisions, "
            "outcomes, and next steps from this meeting."
        ),
    },
    "action_plan": {
        "system": (
            "You are an expert project manager. Create detailed action plans "
            "with clear tasks, owners, and timelines."
        ),
        "prompt": (
            "Generate a comprehensive action plan based on the decisions and "
            "commitments made in this meeting."
        ),
    },
    "follow_up": {
        "system": (
            "You are an expert at creating follow-up communications. Generate "
            "messages that ensure accountability and progress tracking."
        ),
        "prompt": (
            "Create a follow-up message that tracks progress on action items "
            "and maintains momentum from the meeting."
        ),
    },
    "report": {
        "system": (
            "You are an expert at creating detailed reports. Generate "
            "comprehensive reports that document all aspects of the meeting."
        ),
        "prompt": (
            "Create a detailed meeting report that documents all discussions, "
            "decisions, and outcomes."
        ),
    },
}

# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

TONE_INSTRUCTIONS: dict[str, str] = {
    "professional": "Use a professional, formal tone appropriate for business communications.",
    "casual": "Use a casual, friendly tone while maintaining professionalism.",
    "urgent": "Use an urgent tone that conveys importance and need for quick action.",
    "friendly": "Use a warm, friendly tone that builds rapport and collaboration.",
}

LENGTH_INSTRUCTIONS: dict[str, str] = {
    "brief": "Keep the content concise and to the point, focusing only on essential information.",
    "detailed": "Provide comprehensive details while maintaining clarity and structure.",
    "comprehensive": "Include all relevant information with thorough explanations and context.",
}

EMAIL_FORMAT_INSTRUCTION = "Format as: Subject: [subject line]\n\n[email body]"


def build_template_user_prompt(
    template_type: str,
    *,
    summary: str,
    transcript: str,
    participants: list[str] | None = None,
    meeting_type: str | None = None,
    custom_instructions: str | None = None,
) -> str:
    """Build the user message for a smart template request."""
    parts = [
        TEMPLATE_PROMPTS[template_type]["prompt"],
        "",
        "Meeting Context:",
        f"- Type: {meeting_type or 'General Meeting'}",
        f"- Participants: {', '.join(participants) if participants else 'Not specified'}",
        "",
        f"Summary: {summary}",
        "",
        f"Transcript: {transcript}",
    ]
    if custom_instructions:
        parts.extend(["", f"Additional Instructions: {custom_instructions}"])
    if template_type == "email":
        parts.extend(["", EMAIL_FORMAT_INSTRUCTION])
    return "\n".join(parts)
