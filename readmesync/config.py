"""Application configuration loaded from environment variables.

Uses ``pydantic-settings`` for env-var loading, type coercion and ``.env``
file support.  The ``Settings`` value is frozen: it is built once at
startup by :func:`load_settings` and handed to the app factory, which
exposes it to request handlers through a dependency.  Nothing reads the
environment mid-request.
"""

VERSION = "0.1.0"

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from readmesync.errors import ConfigError


# ---------------------------------------------------------------------------
# Required var names: checked after instantiation (not during), so tests
# can build a partial Settings without tripping validation.
# ---------------------------------------------------------------------------
_REQUIRED_VARS: dict[str, str] = {
    "WEBHOOK_SECRET": "the secret used to verify webhook requests",
    "GITHUB_TOKEN": "a personal access token for GitHub",
    "HUGO_CMD": "the path to the hugo command",
    "HUGO_CONFIG": "the path to the hugo config file to use",
    "HUGO_SOURCE": "the root directory of your hugo site",
    "HUGO_OUTPUT": "the directory the final HTML files are written to",
    "OUTPUT_DIR": "the directory within HUGO_SOURCE that stores project READMEs",
}

_PATH_VARS = ("HUGO_CMD", "HUGO_CONFIG", "HUGO_SOURCE", "HUGO_OUTPUT", "OUTPUT_DIR")


class Settings(BaseSettings):
    """Service settings — sourced from environment / ``.env`` file.

    Required vars (blank defaults so tests can construct partial values):
      WEBHOOK_SECRET, GITHUB_TOKEN, HUGO_CMD, HUGO_CONFIG, HUGO_SOURCE,
      HUGO_OUTPUT, OUTPUT_DIR
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # -- credentials --
    WEBHOOK_SECRET: str = ""
    GITHUB_TOKEN: str = ""

    # -- site generator --
    HUGO_CMD: str = ""
    HUGO_CONFIG: str = ""
    HUGO_SOURCE: str = ""
    HUGO_OUTPUT: str = ""
    OUTPUT_DIR: str = ""

    # -- optional with sensible defaults --
    GITHUB_ORG: str = "darlinggo"
    GITHUB_API_BASE: str = "https://api.github.com"
    RELEASE_BRANCH: str = "master"
    HOST: str = "0.0.0.0"
    PORT: int = 9001
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # Upstream calls are bounded; a hung fetch or hugo run fails the request
    # instead of stalling it forever.
    FETCH_TIMEOUT_SECONDS: float = 30.0
    GENERATOR_TIMEOUT_SECONDS: float = 300.0

    @field_validator(*_PATH_VARS)
    @classmethod
    def _expand_env_refs(cls, value: str) -> str:
        """Expand ``$VAR`` / ``${VAR}`` references in path settings."""
        return os.path.expandvars(value)


def missing_settings(settings: Settings) -> list[str]:
    """Return the names of required settings that are blank."""
    return [name for name in _REQUIRED_VARS if not getattr(settings, name)]


def describe_setting(name: str) -> str:
    """Human-readable hint for a required setting, used in startup errors."""
    return f"{name} must be set to {_REQUIRED_VARS[name]}."


def load_settings() -> Settings:
    """Build the process-wide settings value and validate it.

    Raises :class:`ConfigError` listing every missing required variable.
    """
    settings = Settings()
    missing = missing_settings(settings)
    if missing:
        raise ConfigError(
            f"missing required environment variables: {', '.join(missing)}",
            missing=missing,
        )
    return settings
