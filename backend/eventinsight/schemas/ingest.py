"""Schemas for event ingestion."""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Any, Optional

MAX_EVENTS_PER_REQUEST = 100


class IngestEvent(BaseModel):
    """A single event sent by the tracking snippet."""
    event: str = Field(..., min_length=1, max_length=255, description="Event name, e.g. 'signup_click'")
    payload: Optional[Any] = Field(None, description="Arbitrary JSON value, usually an object of properties")
    url: Optional[str] = Field(None, description="Page URL where the event happened")
    referrer: Optional[str] = None
    timestamp: Optional[datetime] = Field(None, description="Client time; server time is used when omitted")


class IngestRequest(BaseModel):
    """Request schema for /api/ingest endpoint."""
    events: List[IngestEvent] = Field(..., max_length=MAX_EVENTS_PER_REQUEST)


class IngestResponse(BaseModel):
    """Response schema for /api/ingest endpoint."""
    success: bool
    events_received: int
