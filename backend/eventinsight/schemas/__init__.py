"""Pydantic schemas for request/response validation."""
from eventinsight.schemas.ingest import IngestEvent, IngestRequest, IngestResponse
from eventinsight.schemas.event import EventResponse

__all__ = ["IngestEvent", "IngestRequest", "IngestResponse", "EventResponse"]
