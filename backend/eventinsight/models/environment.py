"""Environment model (prod, staging, ...) under a project."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, Index, func
from sqlalchemy.orm import relationship
import uuid
from eventinsight.database import Base


class Environment(Base):
    """Deployment context; the scope for API keys and events."""
    __tablename__ = "environments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="environments")
    api_keys = relationship("APIKey", back_populates="environment", cascade="all, delete-orphan", passive_deletes=True)
    events = relationship("Event", back_populates="environment", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("environments_project_id_idx", "project_id"),
        Index("environments_name_project_idx", "project_id", "name", unique=True),
    )
