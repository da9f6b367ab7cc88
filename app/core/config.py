"""
Configuration management for HR Workflow Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Required settings
    DATABASE_URL: str = Field(..., description="Database URL (PostgreSQL, MySQL or SQLite)")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Employee identifiers: PREFIX + zero-padded number (EMP001)
    EMPLOYEE_ID_PREFIX: str = Field(default="EMP", description="Prefix for generated employee identifiers")
    EMPLOYEE_ID_MAX_ATTEMPTS: int = Field(
        default=5,
        ge=1,
        description="Insert attempts before identifier generation gives up on collisions"
    )

    # Position that may be held by at most one active employee
    PRIVILEGED_POSITION: str = Field(default="President", description="Single-holder position name")

    # Positions ensured at startup
    DEFAULT_POSITIONS: str = Field(
        default="President,Manager,Developer,Staff",
        description="Comma-separated list of positions created on startup if missing"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("EMPLOYEE_ID_PREFIX")
    @classmethod
    def validate_employee_id_prefix(cls, v: str) -> str:
        """Prefix must be non-empty letters only"""
        v = v.strip().upper()
        if not v or not v.isalpha():
            raise ValueError("EMPLOYEE_ID_PREFIX must contain letters only")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            # ALLOWED_ORIGINS must not be wildcard in production
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def get_default_positions_list(self) -> List[str]:
        """Default position names, always including the privileged one"""
        names = [name.strip() for name in self.DEFAULT_POSITIONS.split(",") if name.strip()]
        if not any(name.lower() == self.PRIVILEGED_POSITION.lower() for name in names):
            names.insert(0, self.PRIVILEGED_POSITION)
        return names


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
