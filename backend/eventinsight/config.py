"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    environment: str = "development"

    # Security
    api_key_salt: str

    # GitHub OAuth app
    auth_github_id: str
    auth_github_secret: str

    # Public base URL, used to build OAuth redirect URIs
    auth_url: str = "http://localhost:8000"

    # Session lifetime
    session_max_age_days: int = 30
    session_update_age_hours: int = 24

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:3001"

    # Redis (for ARQ worker)
    redis_url: str = "redis://127.0.0.1:6379"

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def session_cookie_secure(self) -> bool:
        """Only mark cookies Secure when served over https."""
        return self.auth_url.startswith("https://")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
