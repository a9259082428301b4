"""User and auth-provider tables (users, accounts, sessions, verification tokens)."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid, PrimaryKeyConstraint, func
from sqlalchemy.orm import relationship
import uuid
from eventinsight.database import Base


class User(Base):
    """Dashboard user, created on first OAuth sign-in."""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True)
    email_verified = Column(DateTime(timezone=True), nullable=True)
    image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    projects = relationship("Project", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class Account(Base):
    """Link between a User and an identity-provider account."""
    __tablename__ = "accounts"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)  # "oauth" | "oidc"
    provider = Column(String, nullable=False)
    provider_account_id = Column(String, nullable=False)
    refresh_token = Column(String, nullable=True)
    access_token = Column(String, nullable=True)
    expires_at = Column(Integer, nullable=True)  # Seconds since epoch
    token_type = Column(String, nullable=True)
    scope = Column(String, nullable=True)
    id_token = Column(String, nullable=True)
    session_state = Column(String, nullable=True)

    user = relationship("User", back_populates="accounts")

    __table_args__ = (
        PrimaryKeyConstraint("provider", "provider_account_id", name="accounts_pkey"),
    )


class Session(Base):
    """Database-backed login session; the token is the cookie value."""
    __tablename__ = "sessions"

    session_token = Column(String, primary_key=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="sessions")


class VerificationToken(Base):
    """Short-lived single-use token, keyed by (identifier, token)."""
    __tablename__ = "verification_tokens"

    identifier = Column(String, nullable=False)
    token = Column(String, nullable=False)
    expires = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("identifier", "token", name="verification_tokens_pkey"),
    )
