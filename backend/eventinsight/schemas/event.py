"""Schemas for reading stored events."""
from pydantic import BaseModel
from typing import Optional, Any

from eventinsight.models import Event
from eventinsight.utils.serialization import serialize_uuid, serialize_datetime


class EventResponse(BaseModel):
    id: str
    environment_id: str
    event_name: str
    payload: Optional[Any] = None
    url: Optional[str] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    timestamp: str

    @classmethod
    def from_orm(cls, obj: Event) -> "EventResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=serialize_uuid(obj.id),
            environment_id=serialize_uuid(obj.environment_id),
            event_name=obj.event_name,
            payload=obj.payload,
            url=obj.url,
            referrer=obj.referrer,
            user_agent=obj.user_agent,
            ip=obj.ip,
            timestamp=serialize_datetime(obj.timestamp),
        )
