"""Environment endpoints, nested under a project."""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from eventinsight.auth.dependencies import get_current_user_id
from eventinsight.database import get_db
from eventinsight.models import Environment
from eventinsight.utils.logger import logger
from eventinsight.utils.exceptions import not_found_error, handle_database_error
from eventinsight.utils.db import get_owned_project
from eventinsight.utils.serialization import serialize_uuid, serialize_datetime

router = APIRouter(prefix="/api/projects/{project_slug}/environments", tags=["environments"])


class EnvironmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)


class EnvironmentResponse(BaseModel):
    id: str
    project_id: str
    name: str
    created_at: Optional[str]

    @classmethod
    def from_orm(cls, obj: Environment) -> "EnvironmentResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=serialize_uuid(obj.id),
            project_id=serialize_uuid(obj.project_id),
            name=obj.name,
            created_at=serialize_datetime(obj.created_at),
        )


@router.get("", response_model=list[EnvironmentResponse])
async def get_environments(
    project_slug: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[EnvironmentResponse]:
    """List a project's environments."""
    project = get_owned_project(db, project_slug, user_id)
    environments = (
        db.query(Environment)
        .filter(Environment.project_id == project.id)
        .order_by(Environment.name)
        .all()
    )
    return [EnvironmentResponse.from_orm(e) for e in environments]


@router.post("", response_model=EnvironmentResponse, status_code=201)
async def create_environment(
    project_slug: str,
    request: EnvironmentCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> EnvironmentResponse:
    """
    Create an environment.

    Names are unique within a project; a duplicate is a 409.
    """
    try:
        project = get_owned_project(db, project_slug, user_id)

        environment = Environment(id=uuid.uuid4(), project_id=project.id, name=request.name)
        db.add(environment)
        db.commit()
        db.refresh(environment)

        logger.info(f"Created environment {request.name} for project {project.id}")
        return EnvironmentResponse.from_orm(environment)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create environment {request.name}: {e}", exc_info=True)
        raise handle_database_error(e, "create_environment")


@router.delete("/{environment_name}")
async def delete_environment(
    project_slug: str,
    environment_name: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    """Delete an environment with its API keys and events."""
    try:
        project = get_owned_project(db, project_slug, user_id)
        environment = db.query(Environment).filter(
            Environment.project_id == project.id,
            Environment.name == environment_name,
        ).first()

        if not environment:
            raise not_found_error("Environment", environment_name)

        db.delete(environment)
        db.commit()

        logger.info(f"Deleted environment {environment_name} of project {project.id}")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete environment {environment_name}: {e}", exc_info=True)
        raise handle_database_error(e, "delete_environment")
