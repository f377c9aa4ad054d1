"""Configuration models for Meetflow.

EngineConfig holds everything the automation stack needs to be built:
storage location, HTTP timeout and retry settings, and the credentials
for the built-in chat completer.

Priority chain: init kwargs > ``MEETFLOW_*`` env vars > defaults.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from meetflow.retry import DEFAULT_RETRY_STATUSES, RetryPolicy


class EngineConfig(BaseSettings):
    """Settings for an AutomationEngine and its collaborators.

    Every field reads ``MEETFLOW_<FIELD>`` from the environment, except
    ``db_path`` which reads ``MEETFLOW_DB``.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEETFLOW_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    db_path: str = Field(default=":memory:", validation_alias="MEETFLOW_DB")
    db_url: Optional[str] = None
    http_timeout: float = Field(default=30.0, gt=0)
    retries: int = Field(default=3, ge=0)
    backoff: float = Field(default=0.5, ge=0)
    retry_statuses: frozenset[int] = DEFAULT_RETRY_STATUSES
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    analysis_model: str = "gpt-4o-mini"
    template_model: str = "gpt-4o"

    @field_validator("db_url", "openai_api_key", mode="before")
    @classmethod
    def _blank_is_unset(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    def retry_policy(self) -> RetryPolicy:
        """Build the RetryPolicy used for every outbound call."""
        return RetryPolicy(
            retries=self.retries,
            backoff=self.backoff,
            retry_statuses=frozenset(self.retry_statuses),
        )

    @classmethod
    def from_env(cls, **overrides: object) -> EngineConfig:
        """Build a config from the environment with keyword overrides.

        Overrides whose value is None are dropped, so optional CLI flags
        fall through to the environment.
        """
        return cls(**{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def defaults(cls) -> EngineConfig:
        """Field defaults only; the environment is not consulted."""
        return cls.model_construct()
