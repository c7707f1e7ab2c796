from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field, SecretStr, ValidationError, conint, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from .constants import NULL_INPUT, TRUTHY_LITERALS
from .errors import ConfigError


class MapActionConfig(BaseSettings):
    """Configuration loaded from GitHub Actions inputs and the runner environment."""

    model_config = SettingsConfigDict(
        # Action inputs arrive as INPUT_<NAME>; runner-provided GITHUB_* values
        # are only read through the explicit aliases below.
        env_prefix="INPUT_",
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        # Unset action inputs arrive as empty strings; treat them as missing so
        # the next alias in line gets a chance.
        env_ignore_empty=True,
    )

    api_token: SecretStr = Field(default="", description="CodeSee API token")
    webpack_config_path: Optional[str] = Field(
        default=None,
        description="Path to a webpack config used to resolve JS/TS imports",
    )
    support_typescript: bool = Field(default=False)
    skip_upload: bool = Field(default=False)
    step: str = Field(default="legacy", description="map, mapUpload, insights or legacy")
    languages: Dict[str, Any] = Field(
        default_factory=dict,
        description="JSON object of per-language enable flags",
    )
    codesee_url: Optional[str] = Field(default=None, description="Override for the CodeSee service URL")
    command_timeout: Optional[conint(ge=1)] = Field(
        default=None,
        description="Seconds before a git or CodeSee CLI command is killed (unset: no limit)",
    )

    # Event metadata; explicit inputs win over the runner-provided values.
    event_data_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("INPUT_WITH_EVENT_DATA", "GITHUB_EVENT_PATH"),
    )
    event_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("INPUT_WITH_EVENT_NAME", "GITHUB_EVENT_NAME"),
    )

    # "octocat/Hello-World". Holds the base repo for both branch and fork PRs.
    repo_full_name: str = Field(
        default="",
        validation_alias=AliasChoices("GITHUB_REPOSITORY"),
    )
    github_origin: str = Field(
        default="https://github.com",
        validation_alias=AliasChoices("GITHUB_SERVER_URL"),
    )

    # On pull requests the head ref beats the github_ref input, which would
    # otherwise point at the pull/<n>/merge commit. GITHUB_REF is never read.
    github_ref: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_HEAD_REF", "INPUT_GITHUB_REF"),
    )
    github_base_ref: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_BASE_REF"),
    )

    @field_validator("support_typescript", "skip_upload", mode="before")
    @classmethod
    def _parse_truthy_literal(cls, value: Any) -> Any:
        if value is None:
            return False
        if isinstance(value, str):
            return value in TRUTHY_LITERALS
        return value

    @field_validator("webpack_config_path", mode="before")
    @classmethod
    def _drop_null_placeholder(cls, value: Any) -> Any:
        if value == NULL_INPUT:
            return None
        return value

    @property
    def has_api_token(self) -> bool:
        return bool(self.api_token.get_secret_value())

    @property
    def repo_origin(self) -> str:
        return f"{self.github_origin}/{self.repo_full_name}"


def load_config() -> MapActionConfig:
    """Resolve configuration from the environment, raising ConfigError on bad input."""
    try:
        return MapActionConfig()
    except (SettingsError, ValidationError) as exc:
        raise ConfigError(f"Configuration error: {exc}") from exc
