"""Event log model."""
from sqlalchemy import Column, Integer, String, DateTime

from splitlab.database import Base


class EventLog(Base):
    """Tracked user action, optionally attributed to an experiment variant. Append-only."""

    __tablename__ = "experiment_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_or_session_id = Column(String(100), nullable=False)
    event_name = Column(String(100), nullable=False, index=True)

    # Experiment attribution (both nullable: events may be unattributed)
    test_id = Column(String(100), index=True)
    variant = Column(String(1))

    timestamp = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<EventLog {self.event_name} test={self.test_id} variant={self.variant}>"
