"""Configuration settings models using Pydantic."""

from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default ceiling for captured stdout/stderr, in bytes
DEFAULT_MAX_BUFFER = 10 * 1024 * 1024


class Settings(BaseSettings):
    """Main gitproc settings.

    The git location fields also accept the bare ``USE_LOCAL_GIT``,
    ``LOCAL_GIT_DIRECTORY`` and ``GIT_EXEC_PATH`` environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITPROC_",
        extra="ignore",
    )

    # Git location - AliasChoices allows reading from either the field name or the bare variable
    use_local_git: bool = Field(
        default=False,
        validation_alias=AliasChoices("use_local_git", "USE_LOCAL_GIT"),
    )
    local_git_directory: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("local_git_directory", "LOCAL_GIT_DIRECTORY"),
    )
    git_exec_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("git_exec_path", "GIT_EXEC_PATH"),
    )

    git_binary: str = "git"
    max_buffer: int = Field(default=DEFAULT_MAX_BUFFER, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @field_validator("local_git_directory", "git_exec_path")
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty location values as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("git_binary")
    @classmethod
    def validate_git_binary(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("git_binary cannot be empty")
        return v.strip()

    @property
    def has_explicit_location(self) -> bool:
        """Whether either git location value was configured explicitly."""
        return self.local_git_directory is not None or self.git_exec_path is not None

    @property
    def discovery_enabled(self) -> bool:
        """Whether the local git installation should be searched for."""
        return self.use_local_git and not self.has_explicit_location
