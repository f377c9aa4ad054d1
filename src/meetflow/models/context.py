"""MeetingContext -- the input a rule pass is evaluated against."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class MeetingContext(BaseModel):
    """Content of one completed meeting.

    ``metadata`` is free-form; the engine reads ``duration`` (minutes) and
    ``sentiment`` from it.
    """

    transcript: str = ""
    summary: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Meeting duration in minutes; 0 when absent or not numeric."""
        raw = self.metadata.get("duration")
        if raw is None or isinstance(raw, bool):
            return 0.0
        try:
            return float(raw)
        except (TypeError, ValueError):
            return 0.0

    @property
    def sentiment(self) -> Optional[str]:
        return self.metadata.get("sentiment")
