"""Database query utility functions."""
from uuid import UUID
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from eventinsight.models import Project, Environment


def parse_uuid(value: str | UUID, label: str = "ID") -> UUID:
    """Parse a UUID from a path/query value, raising 400 on bad input."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} format",
        )


def get_owned_project(db: Session, slug: str, user_id: UUID) -> Project:
    """Get a project by slug, scoped to its owner. Raises 404 otherwise."""
    project = db.query(Project).filter(
        Project.slug == slug,
        Project.user_id == user_id,
    ).first()

    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    return project


def get_owned_environment(db: Session, environment_id: str | UUID, user_id: UUID) -> Environment:
    """
    Get an environment by ID, checking that its project belongs to the user.

    Environments of other users are reported as missing rather than
    forbidden so their IDs cannot be probed.
    """
    environment_id = parse_uuid(environment_id, "environment ID")

    environment = (
        db.query(Environment)
        .join(Project, Environment.project_id == Project.id)
        .filter(Environment.id == environment_id, Project.user_id == user_id)
        .first()
    )

    if not environment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Environment not found")

    return environment
