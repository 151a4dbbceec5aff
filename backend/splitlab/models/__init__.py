"""Database models."""
from splitlab.models.user import User
from splitlab.models.exposure import ExposureLog
from splitlab.models.event import EventLog

__all__ = ["User", "ExposureLog", "EventLog"]
