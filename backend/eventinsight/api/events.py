"""Read access to ingested events."""
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventinsight.auth.dependencies import get_current_user_id
from eventinsight.database import get_db
from eventinsight.models import Event
from eventinsight.schemas.event import EventResponse
from eventinsight.utils.db import get_owned_environment
from eventinsight.utils.exceptions import validation_error
from eventinsight.utils.serialization import as_utc

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=list[EventResponse])
async def get_events(
    environment_id: str = Query(..., description="Environment ID"),
    start: Optional[datetime] = Query(None, description="Inclusive lower bound"),
    end: Optional[datetime] = Query(None, description="Exclusive upper bound"),
    event_name: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[EventResponse]:
    """
    Events of one environment in a time range, newest first.

    Served by the (environment_id, timestamp) index.
    """
    start, end = as_utc(start), as_utc(end)
    if start and end and start >= end:
        raise validation_error("start must be before end")

    environment = get_owned_environment(db, environment_id, user_id)

    query = db.query(Event).filter(Event.environment_id == environment.id)
    if start:
        query = query.filter(Event.timestamp >= start)
    if end:
        query = query.filter(Event.timestamp < end)
    if event_name:
        query = query.filter(Event.event_name == event_name)

    events = query.order_by(Event.timestamp.desc()).limit(limit).all()
    return [EventResponse.from_orm(e) for e in events]
