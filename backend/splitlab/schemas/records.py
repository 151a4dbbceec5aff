"""Exposure and event log records."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExposureRecord(BaseModel):
    """A visitor was shown a variant."""

    user_or_session_id: str
    test_id: str
    variant: str
    timestamp: datetime = Field(default_factory=utc_now)


class EventRecord(BaseModel):
    """A visitor performed a tracked action."""

    user_or_session_id: str
    event_name: str
    test_id: Optional[str] = None
    variant: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
