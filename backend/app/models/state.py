from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from app.database import Base


class StateEntry(Base):
    """One JSON bundle of engine state per key (active_outages, campaigns, ...)."""
    __tablename__ = "state_entries"

    key = Column(String(50), primary_key=True)
    payload = Column(Text, nullable=False)
    saved_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
