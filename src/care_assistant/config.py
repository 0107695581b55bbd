"""Configuration models for the care assistant."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, SecretStr

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


class RemoteProviderConfig(BaseModel):
    """Configures the language-model-backed provider and its endpoint."""

    enabled: bool = True
    api_key: SecretStr = SecretStr("")
    api_url: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-3.5-turbo"
    max_tokens: int = Field(default=1000, ge=1)
    followup_max_tokens: int = Field(default=500, ge=1)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    deadline_seconds: float = Field(default=60.0, gt=0.0)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key.get_secret_value().strip())

    @property
    def base_url(self) -> str:
        """The API root the chat-completions client expects."""
        suffix = "/chat/completions"
        url = self.api_url.rstrip("/")
        if url.endswith(suffix):
            url = url[: -len(suffix)]
        return url

    @classmethod
    def from_env(cls) -> "RemoteProviderConfig":
        defaults = cls()
        return cls(
            enabled=_env_flag("CARE_REMOTE_ENABLED", True),
            api_key=SecretStr(os.getenv("OPENAI_API_KEY", "")),
            api_url=os.getenv("OPENAI_API_URL", defaults.api_url),
            model=os.getenv("OPENAI_MODEL", defaults.model),
            timeout_seconds=float(
                os.getenv("CARE_REMOTE_TIMEOUT_SECONDS", defaults.timeout_seconds)
            ),
        )


class RuleBasedConfig(BaseModel):
    """Configures result sizes for the deterministic provider."""

    sample_count: int = Field(default=3, ge=1)
    search_limit: int = Field(default=5, ge=1)
    facility_limit: int = Field(default=10, ge=1)


class DataStoreConfig(BaseModel):
    """Configures the bundled sqlite data store."""

    sqlite_path: str = "care_assistant.db"
    seed_demo: bool = False

    @classmethod
    def from_env(cls) -> "DataStoreConfig":
        return cls(
            sqlite_path=os.getenv("CARE_SQLITE_PATH", "care_assistant.db"),
            seed_demo=_env_flag("CARE_SEED_DEMO", False),
        )
