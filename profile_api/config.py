"""Application configuration."""
from pydantic_settings import BaseSettings

PEOPLE_ME_URL = (
    "https://people.googleapis.com/v1/people/me?personFields=phoneNumbers,addresses"
)


class Settings(BaseSettings):
    """App settings loaded from environment variables."""

    app_name: str = "Profile Editor API"
    debug: bool = False
    environment: str = "development"  # "production" marks the session cookie Secure
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    database_url: str = "sqlite:///./profile.db"  # Use DATABASE_URL env for PostgreSQL
    users_table: str = "app_users"
    auto_migrate: bool = False
    # Google Sign-In
    google_client_id: str = ""
    people_api_url: str = PEOPLE_ME_URL
    http_timeout: float = 10.0
    # Session cookie
    app_jwt_secret: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    port: int = 3001

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def session_max_age(self) -> int:
        """Cookie max-age in seconds."""
        return self.session_ttl_days * 24 * 60 * 60


settings = Settings()
