"""Pydantic Settings model for application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from donder_release.utils.constants import DEFAULT_GITHUB_API_URL, DEFAULT_REQUEST_TIMEOUT


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # GitHub API settings
    GITHUB_API_URL: str = DEFAULT_GITHUB_API_URL
    REQUEST_TIMEOUT: float = DEFAULT_REQUEST_TIMEOUT

    # GitHub token settings, GH_TOKEN takes precedence
    GH_TOKEN: str | None = None
    GITHUB_TOKEN: str | None = None

    @property
    def github_token(self) -> str | None:
        """The first token defined in the environment."""
        return self.GH_TOKEN or self.GITHUB_TOKEN or None
