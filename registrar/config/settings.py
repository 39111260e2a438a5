"""Application settings using Pydantic BaseSettings."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from registrar.auth.params import CostParameters


def _get_default_db_path() -> str:
    """Get absolute path to default SQLite database."""
    # registrar/config/ -> project root
    config_dir = os.path.dirname(os.path.abspath(__file__))
    root_dir = os.path.dirname(os.path.dirname(config_dir))
    db_path = os.path.join(root_dir, "data", "registrar.db")
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    max_request_bytes: int = Field(default=65536)

    # Database
    database_url: str = Field(default_factory=_get_default_db_path)
    database_url_postgres: str = Field(default="")

    # Registration policy
    password_min_length: int = Field(default=8, ge=1)
    password_max_length: int = Field(default=1024, ge=1)

    # Argon2id cost parameters. Changing these only affects new hashes;
    # stored hashes carry their own parameters.
    argon2_memory_kib: int = Field(default=64 * 1024)
    argon2_iterations: int = Field(default=3)
    argon2_parallelism: int = Field(default=2)
    argon2_salt_length: int = Field(default=16)
    argon2_key_length: int = Field(default=32)

    @property
    def effective_database_url(self) -> str:
        """Get the effective database URL (Postgres takes precedence if set)."""
        return self.database_url_postgres or self.database_url

    @property
    def is_sqlite(self) -> bool:
        return self.effective_database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def cost_parameters(self) -> CostParameters:
        return CostParameters(
            memory_kib=self.argon2_memory_kib,
            iterations=self.argon2_iterations,
            parallelism=self.argon2_parallelism,
            salt_length=self.argon2_salt_length,
            key_length=self.argon2_key_length,
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in {"development", "staging", "production"}:
            raise ValueError("ENVIRONMENT must be one of: development, staging, production")
        return vv

    @model_validator(mode="after")
    def validate_cross_field_constraints(self) -> "Settings":
        if self.password_min_length > self.password_max_length:
            raise ValueError("PASSWORD_MIN_LENGTH must not exceed PASSWORD_MAX_LENGTH")
        # Fail at startup rather than on the first registration.
        self.cost_parameters
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
