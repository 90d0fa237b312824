"""Application settings and configuration.

This module provides Pydantic settings classes for the run stream client,
loaded from environment variables with support for nested configuration.
"""

import logging

import pydantic_settings
from pydantic import BaseModel, ConfigDict, Field, field_validator

from runstream_client.platform.clients.runs.config import AuthConfig, RunClientConfig


class RunServiceSettings(BaseModel):
    """Connection settings for the run service.

    Attributes:
        base_url: Base URL of the service API, e.g. https://app.example.com/api
        api_key: Optional API key for authentication
        api_key_header: Header carrying the API key
        bearer_token: Optional bearer token for authentication
        connect_timeout_seconds: Connection timeout in seconds
        deadline_seconds: Optional deadline for a whole run in seconds
    """

    base_url: str = Field("http://localhost:3000/api")
    api_key: str | None = None
    api_key_header: str = Field("X-API-Key")
    bearer_token: str | None = None
    connect_timeout_seconds: float = Field(10.0)
    deadline_seconds: float | None = None

    def client_config(self) -> RunClientConfig:
        return RunClientConfig(
            connect_timeout_seconds=self.connect_timeout_seconds,
            deadline_seconds=self.deadline_seconds,
        )

    def auth_config(self) -> AuthConfig | None:
        if not (self.api_key or self.bearer_token):
            return None
        return AuthConfig(
            api_key=self.api_key,
            api_key_header=self.api_key_header,
            bearer_token=self.bearer_token,
        )


class LoggingSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: str = Field("INFO")
    json_output: bool = Field(False, alias="json")

    @field_validator("level")
    @classmethod
    def _validate_log_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging._nameToLevel:
            raise ValueError(f'invalid value "{v}"')
        return v_upper


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_nested_delimiter="__")

    run_service: RunServiceSettings = RunServiceSettings()
    logging: LoggingSettings = LoggingSettings()
