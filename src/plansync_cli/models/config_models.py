"""Configuration models for PlanSync CLI."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class StoreConfig(BaseModel):
    """Remote project store configuration."""

    url: str = Field(default="", description="Base URL of the record store")
    anon_key: str = Field(default="", description="Public API key sent with every request")
    table: str = Field(default="projects")
    timeout: int = Field(default=30)
    retry: int = Field(default=3)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


class AuthConfig(BaseModel):
    """Authentication configuration."""

    redirect_url: str | None = Field(
        default=None, description="Where password-reset emails send the user"
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["table", "json", "yaml"] = Field(default="table")
    color: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main PlanSync configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
