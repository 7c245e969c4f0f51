from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "fantasy_book_hub"
    dsn: Optional[str] = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over the discrete fields.",
    )
    serverless: bool = Field(
        default=False,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )
    create_tables: bool = Field(
        default=True,
        description="Create missing tables on application startup.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.dsn:
            return self.dsn
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


class SecurityConfig(BaseSettings):
    """JWT and application security configuration."""

    jwt_secret_key: SecretStr = Field(
        default=SecretStr("secret_dev_key"),
        validation_alias="JWT_SECRET",
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expires_minutes: int = Field(
        default=24 * 60,
        validation_alias="JWT_EXPIRATION_MINUTES",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


class SeedConfig(BaseSettings):
    """Defaults for the database seeding script."""

    admin_username: str = "admin"
    admin_email: str = "admin@example.com"
    admin_password: SecretStr = Field(default=SecretStr("admin123"))
    books_file: str = "books_data.json"

    model_config = SettingsConfigDict(
        env_prefix="SEED_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Fantasy Book Hub API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: Optional[str] = "logs/app.log"
    api_prefix: str = "/api"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Security
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    # Seeding
    seed: SeedConfig = Field(default_factory=SeedConfig)

    # CORS
    cors_origins: list[str] = ["http://localhost:3001"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]
    cors_allow_headers: list[str] = ["Content-Type", "Authorization"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Build settings from the environment once per process."""

    return Settings()
