"""Event ingestion endpoint."""
import uuid
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from eventinsight.database import get_db
from eventinsight.models import Environment, Event
from eventinsight.auth.api_key import get_environment_from_api_key
from eventinsight.schemas.ingest import IngestRequest, IngestResponse
from eventinsight.utils.logger import logger
from eventinsight.utils.serialization import as_utc, utc_now
from eventinsight.utils.url import client_ip

router = APIRouter(prefix="/api", tags=["ingest"])


@router.post("/ingest", response_model=IngestResponse)
async def ingest_events(
    request: IngestRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    environment: Environment = Depends(get_environment_from_api_key),
) -> IngestResponse:
    """
    Ingest a batch of events from a client site.

    Requires an API key (``X-API-Key``) identifying the environment; no
    session is involved. User agent and IP are taken from the request.

    Args:
        request: Batch of events
        http_request: Raw request, for headers and client address
        db: Database session
        environment: Environment resolved from the API key

    Returns:
        Number of stored events
    """
    if not request.events:
        return IngestResponse(success=True, events_received=0)

    user_agent = http_request.headers.get("user-agent")
    ip = client_ip(
        http_request.headers.get("x-forwarded-for"),
        http_request.client.host if http_request.client else None,
    )
    received_at = utc_now()

    try:
        events = [
            Event(
                id=uuid.uuid4(),
                environment_id=environment.id,
                event_name=item.event,
                payload=item.payload,
                url=item.url,
                referrer=item.referrer,
                user_agent=user_agent,
                ip=ip,
                timestamp=as_utc(item.timestamp) or received_at,
            )
            for item in request.events
        ]
        db.add_all(events)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to ingest events for environment {environment.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to ingest events",
        )

    return IngestResponse(success=True, events_received=len(events))
