import os
import re
from pathlib import Path
from typing import Optional

import toml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Bot(BaseSettings):
    """The bot settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BOT_", extra="ignore")

    NAME: str = "Banhammer"
    TOKEN: str
    ENVIRONMENT: str = "development"

    @field_validator("TOKEN")
    @classmethod
    def check_token_format(cls, v: str) -> str:
        """Validate discord tokens format."""
        pattern = re.compile(r".{26}\..{6}\..{38}")
        assert pattern.fullmatch(
            v
        ), f"Discord token must follow >> {pattern.pattern} << pattern."
        return v


class Database(BaseSettings):
    """The database settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MYSQL_", extra="ignore")

    HOST: str = "localhost"
    PORT: int = 3306
    DATABASE: str = "bot"
    USER: str = "bot"
    PASSWORD: str = ""
    CHARSET: str = "utf8mb4"

    def assemble_db_connection(self) -> str:
        connection_string = (
            f"mariadb+asyncmy://{self.USER}:{self.PASSWORD}@{self.HOST}:{self.PORT}/"
            f"{self.DATABASE}?charset="
            f"{self.CHARSET}"
        )
        return connection_string


class Channels(BaseSettings):
    """Channel ids."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CHANNEL_", extra="ignore")

    DEVLOG: int = 0
    JOIN_LOG: int

    @field_validator("DEVLOG", "JOIN_LOG")
    @classmethod
    def check_ids_format(cls, v: int) -> int:
        """Validate discord ids format."""
        if not v:
            return v

        assert len(str(v)) > 17, "Discord ids must have a length of 19."
        return v


class Roles(BaseSettings):
    """The roles settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="ROLE_", extra="ignore")

    ADMINISTRATOR: int
    SENIOR_STAFF: int
    UPPER_STAFF: int

    @field_validator("*", mode="before")
    @classmethod
    def check_length(cls, value: str | int) -> str | int:
        value_str = str(value)
        if not 17 <= len(value_str) <= 20:
            raise ValueError("Each role ID must be between 18 & 19 characters long")
        return value


class Gban(BaseSettings):
    """Global ban settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="GBAN_", extra="ignore")

    # Guild whose ban list mirrors the ledger. Used by the import and the drift detection.
    REFERENCE_GUILD_ID: int
    DEFAULT_REASON: str = "Banned from forums"
    DEFAULT_UNBAN_REASON: str = "Unbanned from forums"
    SYNC_REASON: str = "sync gban"
    WINDOW_MINUTES: int = 5
    FAILSAFE_SECONDS: int = 7 * 60

    @field_validator("REFERENCE_GUILD_ID")
    @classmethod
    def check_ids_format(cls, v: int) -> int:
        """Validate discord ids format."""
        assert len(str(v)) > 17, "Discord ids must have a length of 19."
        return v


class Global(BaseSettings):
    """The app settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    bot: Bot | None = None
    database: Database | None = None
    channels: Channels | None = None
    roles: Roles | None = None
    gban: Gban | None = None

    role_groups: dict[str, list[int | str]] = {}

    guild_ids: list[int]
    dev_guild_ids: list[int] = []

    SENTRY_DSN: str | None = None
    LOG_LEVEL: str | int = "INFO"
    DEBUG: bool = False

    METRICS_PORT: int = 9090
    START_METRICS_SERVER: bool = False

    ROOT: Path | None = None

    VERSION: str | None = Field(default=None, validate_default=True)

    @field_validator("VERSION", mode="before")
    @classmethod
    def get_project_versions(cls, v: Optional[str]) -> str | None:
        def _get_from_pyproject() -> str | None:
            try:
                with open("pyproject.toml", "r") as f:
                    config = toml.load(f)
            except FileNotFoundError:
                return None
            return config.get("project", {}).get("version")

        if not v:
            return _get_from_pyproject()
        return v

    @field_validator("guild_ids", "dev_guild_ids")
    @classmethod
    def check_ids_format(cls, v: list[int]) -> list[int]:
        """Validate discord ids format."""
        for discord_id in v:
            assert len(str(discord_id)) > 17, "Discord ids must have a length of 19."
        return v


def load_settings(env_file: str | None = None):
    global_settings = Global(_env_file=env_file)
    global_settings.bot = Bot(_env_file=env_file)
    global_settings.database = Database(_env_file=env_file)
    global_settings.channels = Channels(_env_file=env_file)
    global_settings.roles = Roles(_env_file=env_file)
    global_settings.gban = Gban(_env_file=env_file)

    global_settings.role_groups = {
        "ALL_ADMINS": [global_settings.roles.ADMINISTRATOR],
        "ALL_GBAN_STAFF": [
            global_settings.roles.ADMINISTRATOR,
            global_settings.roles.SENIOR_STAFF,
            global_settings.roles.UPPER_STAFF,
        ],
    }

    return global_settings


settings = load_settings(
    os.environ.get("ENV_PATH") if os.environ.get("BOT_ENVIRONMENT") else ".test.env"
)
