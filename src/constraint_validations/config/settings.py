from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Any, Literal
from functools import lru_cache

from sqlalchemy.engine import URL

from ..constraints.messages import MessageTable, build_message_table
from ..validators.config_validators import to_uppercase, to_lowercase, check_message_overrides


class Settings(BaseSettings):
    """
    Settings loaded from the environment (and an optional .env file next to the package).

    Only the logging knobs and CONSTRAINT_MESSAGES matter to the conversion itself;
    the POSTGRES_* fields are used by `db.session` and the integration tests.
    """

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database
    POSTGRES_DRIVER: Literal["asyncpg", "psycopg"] = "asyncpg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "postgres"
    SQLALCHEMY_ECHO: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/constraint-validations")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # Violation category -> message, merged onto the defaults, e.g.
    # CONSTRAINT_MESSAGES='{"unique": "is already in use"}'
    CONSTRAINT_MESSAGES: dict[str, str] = {}

    @property
    def DATABASE_URL(self) -> str:
        """SQLAlchemy URL of the configured PostgreSQL database (async driver)."""
        url = URL.create(
            drivername=f"postgresql+{self.POSTGRES_DRIVER}",
            username=self.POSTGRES_USERNAME,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )
        return url.render_as_string(hide_password=False)

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        # logging expects upper-case level names; accept "debug" from the environment
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("CONSTRAINT_MESSAGES", mode="before")
    def validate_constraint_messages(cls, v: dict[str, Any] | None) -> dict[str, str]:
        """
        Reject overrides for unknown violation categories.

        Recognized keys: not_null, check, unique, foreign_key, referenced_by.
        """
        return check_message_overrides(v)


def message_table(settings: Settings) -> MessageTable:
    """Read-only message table for the configured overrides."""
    return build_message_table(settings.CONSTRAINT_MESSAGES)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
