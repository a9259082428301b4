"""API key authentication for the ingestion endpoint."""
from typing import Optional
from fastapi import Header, Depends
from sqlalchemy.orm import Session

from eventinsight.models import APIKey, Environment
from eventinsight.database import get_db
from eventinsight.utils.hashing import hash_api_key
from eventinsight.utils.exceptions import authentication_error
from eventinsight.utils.serialization import utc_now


def get_environment_from_api_key(
    api_key: Optional[str] = Header(None, alias="X-API-Key", description="API key for the environment"),
    db: Session = Depends(get_db),
) -> Environment:
    """
    Resolve the environment an API key belongs to.

    Records the key's last use.

    Args:
        api_key: API key from header
        db: Database session

    Returns:
        Environment instance

    Raises:
        HTTPException: If API key is missing or invalid
    """
    if not api_key:
        raise authentication_error("API key is required")

    db_api_key = db.query(APIKey).filter(APIKey.key_hash == hash_api_key(api_key)).first()

    if not db_api_key:
        raise authentication_error("Invalid API key")

    db_api_key.last_used_at = utc_now()
    db.commit()

    return db_api_key.environment
