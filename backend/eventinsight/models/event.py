"""Event model for tracked analytics events."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, Index, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
import uuid
from eventinsight.database import Base


class Event(Base):
    """A single event (click, submit, pageview...) sent by a client site."""
    __tablename__ = "events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_name = Column(String, nullable=False)
    payload = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    url = Column(String, nullable=True)
    referrer = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    ip = Column(String, nullable=True)
    environment_id = Column(Uuid(as_uuid=True), ForeignKey("environments.id", ondelete="CASCADE"), nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    environment = relationship("Environment", back_populates="events")

    # Dominant query: events for one environment within a time range
    __table_args__ = (
        Index("events_environment_id_idx", "environment_id"),
        Index("events_timestamp_idx", "timestamp"),
        Index("events_environment_timestamp_idx", "environment_id", "timestamp"),
    )
