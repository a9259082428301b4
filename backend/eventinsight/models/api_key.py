"""API Key model."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, Index, func
from sqlalchemy.orm import relationship
import uuid
from eventinsight.database import Base


class APIKey(Base):
    """API key for authenticating ingestion requests from client sites."""
    __tablename__ = "api_keys"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    key_hash = Column(String, nullable=False)  # Salted SHA-256 of the raw key
    key_prefix = Column(String, nullable=False)  # "ei_abc123..." shown in the dashboard
    environment_id = Column(Uuid(as_uuid=True), ForeignKey("environments.id", ondelete="CASCADE"), nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    environment = relationship("Environment", back_populates="api_keys")

    __table_args__ = (
        Index("api_keys_environment_id_idx", "environment_id"),
        Index("api_keys_key_hash_idx", "key_hash", unique=True),
    )
