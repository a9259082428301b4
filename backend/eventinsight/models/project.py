"""Project model, owned by a user."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, Index, func
from sqlalchemy.orm import relationship
import uuid
from eventinsight.database import Base


class Project(Base):
    """Project/website model."""
    __tablename__ = "projects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="projects")
    environments = relationship(
        "Environment", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    # Slugs only need to be unique per owner
    __table_args__ = (
        Index("projects_user_id_idx", "user_id"),
        Index("projects_slug_idx", "user_id", "slug", unique=True),
    )
