"""Projects API endpoints."""
import uuid
import re
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from eventinsight.auth.dependencies import get_current_user_id
from eventinsight.database import get_db
from eventinsight.models import Project
from eventinsight.utils.logger import logger
from eventinsight.utils.exceptions import validation_error, handle_database_error
from eventinsight.utils.db import get_owned_project
from eventinsight.utils.serialization import serialize_uuid, serialize_datetime

router = APIRouter(prefix="/api/projects", tags=["projects"])

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def generate_slug(name: str) -> str:
    """Generate a URL-friendly slug from a project name."""
    # Convert to lowercase
    slug = name.lower()
    # Replace spaces and underscores with hyphens
    slug = re.sub(r'[\s_]+', '-', slug)
    # Remove special characters, keep only alphanumeric and hyphens
    slug = re.sub(r'[^a-z0-9-]', '', slug)
    # Remove multiple consecutive hyphens
    slug = re.sub(r'-+', '-', slug)
    # Remove leading/trailing hyphens
    slug = slug.strip('-')
    # Ensure it's not empty
    if not slug:
        slug = 'project'
    return slug


def get_unique_slug(db: Session, base_slug: str, user_id: uuid.UUID, exclude_project_id: Optional[uuid.UUID] = None) -> str:
    """Generate a unique slug for a user, appending numbers if needed."""
    slug = base_slug
    counter = 1

    while True:
        query = db.query(Project).filter(
            Project.slug == slug,
            Project.user_id == user_id
        )
        if exclude_project_id:
            query = query.filter(Project.id != exclude_project_id)

        existing = query.first()
        if not existing:
            return slug

        slug = f"{base_slug}-{counter}"
        counter += 1


def check_slug(slug: str) -> str:
    if not SLUG_PATTERN.match(slug):
        raise validation_error("Slug may only contain lowercase letters, digits and single hyphens")
    return slug


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None  # Derived from the name when omitted


class ProjectUpdate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    name: str
    slug: str
    created_at: Optional[str]
    updated_at: Optional[str]

    @classmethod
    def from_orm(cls, obj: Project) -> "ProjectResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=serialize_uuid(obj.id),
            user_id=serialize_uuid(obj.user_id),
            name=obj.name,
            slug=obj.slug,
            created_at=serialize_datetime(obj.created_at),
            updated_at=serialize_datetime(obj.updated_at),
        )


@router.get("", response_model=list[ProjectResponse])
async def get_projects(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[ProjectResponse]:
    """List the signed-in user's projects."""
    try:
        projects = db.query(Project).filter(Project.user_id == user_id).order_by(Project.created_at).all()
        return [ProjectResponse.from_orm(p) for p in projects]
    except Exception as e:
        logger.error(f"Failed to get projects for user {user_id}: {e}", exc_info=True)
        raise handle_database_error(e, "get_projects")


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project: ProjectCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProjectResponse:
    """
    Create a new project.

    An explicit slug must be free for this user (409 otherwise); a slug
    derived from the name gets a numeric suffix until it is free.

    Args:
        project: Project creation data
        user_id: Signed-in user
        db: Database session

    Returns:
        Created project
    """
    try:
        if project.slug:
            slug = check_slug(project.slug)
        else:
            slug = get_unique_slug(db, generate_slug(project.name), user_id)

        new_project = Project(
            id=uuid.uuid4(),
            user_id=user_id,
            name=project.name,
            slug=slug,
        )

        db.add(new_project)
        db.commit()
        db.refresh(new_project)

        logger.info(f"Created project {new_project.id} ({slug}) for user {user_id}")
        return ProjectResponse.from_orm(new_project)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create project: {e}", exc_info=True)
        raise handle_database_error(e, "create_project")


@router.get("/{project_slug}", response_model=ProjectResponse)
async def get_project(
    project_slug: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProjectResponse:
    """Get one of the user's projects by slug."""
    return ProjectResponse.from_orm(get_owned_project(db, project_slug, user_id))


@router.put("/{project_slug}", response_model=ProjectResponse)
async def update_project(
    project_slug: str,
    project_update: ProjectUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProjectResponse:
    """
    Rename a project.

    The slug follows the name unless one is given explicitly.

    Args:
        project_slug: The project slug to update
        project_update: Updated project data
        user_id: Signed-in user
        db: Database session

    Returns:
        Updated project
    """
    try:
        project = get_owned_project(db, project_slug, user_id)

        if project_update.slug:
            project.slug = check_slug(project_update.slug)
        elif project.name != project_update.name:
            project.slug = get_unique_slug(
                db, generate_slug(project_update.name), user_id, exclude_project_id=project.id
            )
        project.name = project_update.name

        db.commit()
        db.refresh(project)

        return ProjectResponse.from_orm(project)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update project {project_slug}: {e}", exc_info=True)
        raise handle_database_error(e, "update_project")


@router.delete("/{project_slug}")
async def delete_project(
    project_slug: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict[str, str]:
    """Delete a project with its environments, API keys and events."""
    try:
        project = get_owned_project(db, project_slug, user_id)
        project_id = project.id

        db.delete(project)
        db.commit()

        logger.info(f"Deleted project {project_id} for user {user_id}")
        return {"message": "Project deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete project {project_slug}: {e}", exc_info=True)
        raise handle_database_error(e, "delete_project")
