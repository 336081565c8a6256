# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "team-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8006"))

    # memory | sql
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory").lower()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./team_service.db")
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    IDENTITY_SERVICE_URL: str = os.getenv(
        "IDENTITY_SERVICE_URL", "http://user-service:8001"
    )
    COLLABORATION_SERVICE_URL: str = os.getenv(
        "COLLABORATION_SERVICE_URL", "http://chat-service:8005"
    )
    HTTP_CLIENT_TIMEOUT: float = float(os.getenv("HTTP_CLIENT_TIMEOUT", "3.0"))

    MAX_SUBROLE_SUGGESTIONS: int = int(os.getenv("MAX_SUBROLE_SUGGESTIONS", "5"))
    MAX_ALTERNATIVE_ROLES: int = int(os.getenv("MAX_ALTERNATIVE_ROLES", "3"))
    CANDIDATE_SEARCH_LIMIT: int = int(os.getenv("CANDIDATE_SEARCH_LIMIT", "20"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    SEED_ROLE_CATALOG: bool = (
        os.getenv("SEED_ROLE_CATALOG", "true").lower() == "true"
    )


settings = Settings()
