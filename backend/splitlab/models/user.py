"""User model."""
from sqlalchemy import Column, String, DateTime, Uuid
from datetime import datetime, timezone
import uuid

from splitlab.database import Base


class User(Base):
    """API-key holder allowed to read experiment results."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    api_key_hash = Column(String(255), unique=True, nullable=False, index=True)
    label = Column(String(100))  # who the key was issued to
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<User {self.id}>"
