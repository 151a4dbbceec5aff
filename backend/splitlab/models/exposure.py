"""Exposure log model."""
from sqlalchemy import Column, Integer, String, DateTime

from splitlab.database import Base


class ExposureLog(Base):
    """One row per visitor shown a variant on a route visit. Append-only."""

    __tablename__ = "experiment_exposures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_or_session_id = Column(String(100), nullable=False)
    test_id = Column(String(100), nullable=False, index=True)
    variant = Column(String(1), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ExposureLog {self.test_id}:{self.variant} visitor={self.user_or_session_id}>"
