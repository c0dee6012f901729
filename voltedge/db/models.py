from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime

from voltedge.db.base import Base


class CartSlot(Base):
    """One durable cart slot, keyed by storage key and session id."""
    __tablename__ = "cart_slots"

    key = Column(String(255), primary_key=True)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
