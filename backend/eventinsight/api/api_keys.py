"""API Keys management endpoints."""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from eventinsight.auth.dependencies import get_current_user_id
from eventinsight.database import get_db
from eventinsight.models import APIKey, Environment, Project
from eventinsight.utils.hashing import hash_api_key, generate_api_key, api_key_display_prefix
from eventinsight.utils.logger import logger
from eventinsight.utils.exceptions import not_found_error, handle_database_error
from eventinsight.utils.db import get_owned_environment, parse_uuid
from eventinsight.utils.serialization import serialize_uuid, serialize_datetime

router = APIRouter(prefix="/api/api-keys", tags=["api-keys"])


class APIKeyCreate(BaseModel):
    environment_id: str
    name: str = Field(..., min_length=1)


class APIKeyResponse(BaseModel):
    id: str
    environment_id: str
    key_prefix: str
    name: str
    last_used_at: Optional[str]
    created_at: Optional[str]

    @classmethod
    def from_orm(cls, obj: APIKey) -> "APIKeyResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=serialize_uuid(obj.id),
            environment_id=serialize_uuid(obj.environment_id),
            key_prefix=obj.key_prefix,
            name=obj.name,
            last_used_at=serialize_datetime(obj.last_used_at),
            created_at=serialize_datetime(obj.created_at),
        )


class APIKeyCreated(BaseModel):
    key: str  # Raw key, only returned once
    apiKey: APIKeyResponse


@router.get("", response_model=list[APIKeyResponse])
async def get_api_keys(
    environment_id: str = Query(..., description="Environment ID"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[APIKeyResponse]:
    """List the API keys of an environment."""
    environment = get_owned_environment(db, environment_id, user_id)
    keys = (
        db.query(APIKey)
        .filter(APIKey.environment_id == environment.id)
        .order_by(APIKey.created_at)
        .all()
    )
    return [APIKeyResponse.from_orm(k) for k in keys]


@router.post("", response_model=APIKeyCreated, status_code=201)
async def create_api_key(
    request: APIKeyCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> APIKeyCreated:
    """
    Create a new API key.

    Only the hash and a display prefix are stored; the raw key is in the
    response and cannot be recovered later.

    Args:
        request: API key creation data
        user_id: Signed-in user
        db: Database session

    Returns:
        The raw key and the stored API key details
    """
    try:
        environment = get_owned_environment(db, request.environment_id, user_id)

        raw_key = generate_api_key()
        new_key = APIKey(
            id=uuid.uuid4(),
            environment_id=environment.id,
            key_hash=hash_api_key(raw_key),
            key_prefix=api_key_display_prefix(raw_key),
            name=request.name,
        )

        db.add(new_key)
        db.commit()
        db.refresh(new_key)

        logger.info(f"Created API key {new_key.id} for environment {environment.id}")

        return APIKeyCreated(key=raw_key, apiKey=APIKeyResponse.from_orm(new_key))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create API key: {e}", exc_info=True)
        raise handle_database_error(e, "create_api_key")


@router.delete("/{key_id}")
async def delete_api_key(
    key_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    """Revoke an API key."""
    try:
        key = (
            db.query(APIKey)
            .join(Environment, APIKey.environment_id == Environment.id)
            .join(Project, Environment.project_id == Project.id)
            .filter(APIKey.id == parse_uuid(key_id, "API key ID"), Project.user_id == user_id)
            .first()
        )
        if not key:
            raise not_found_error("API key")

        db.delete(key)
        db.commit()

        logger.info(f"Deleted API key {key_id}")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete API key {key_id}: {e}", exc_info=True)
        raise handle_database_error(e, "delete_api_key")
