"""Configuration models, YAML loader, and the persisted credential store."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

API_KEY_KEY = "gemini_api_key"
TEMPERATURE_KEY = "gemini_temperature"

DEFAULT_TEMPERATURE = 0.4


def clamp_temperature(value: float) -> float:
    """Clamp a sampling temperature into [0.0, 1.0]."""
    return max(0.0, min(1.0, value))


class ModelConfig(BaseModel):
    """Model provider settings."""

    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    thinking_budget: int = Field(default=24576, ge=0)
    output_language: str = "Simplified Chinese"
    default_temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=1.0)

    @field_validator("output_language")
    @classmethod
    def language_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "output_language must not be empty"
            raise ValueError(msg)
        return v.strip()


class StorageConfig(BaseModel):
    """Durable storage configuration."""

    path: str = "data/screening.db"
    max_value_bytes: int | None = Field(default=None, ge=1)


class HistoryConfig(BaseModel):
    """History retention settings."""

    max_sessions: int = Field(default=20, ge=1)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def load(cls, path: str | Path | None) -> "Settings":
        """Load settings from path, or return defaults when path is None."""
        if path is None:
            return cls()
        return cls.from_yaml(path)


class ClientConfig(BaseModel):
    """Snapshot of everything the analysis client needs for one call.

    Frozen — built once from the ConfigStore and passed explicitly.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    provider: str = "gemini"
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=1.0)
    model: str = "gemini-2.5-flash"
    thinking_budget: int = Field(default=24576, ge=0)
    output_language: str = "Simplified Chinese"


class ConfigStore:
    """Persists the API key and sampling temperature under named keys.

    Usage::

        cfg = ConfigStore(store, settings.model)
        cfg.set_temperature(0.7)
        client = AnalysisClient(cfg.client_config())
    """

    def __init__(self, store: KeyValueStore, model: ModelConfig | None = None) -> None:
        self._store = store
        self._model = model or ModelConfig()

    def get_api_key(self) -> str | None:
        key = self._store.get(API_KEY_KEY)
        if key is None or not key.strip():
            return None
        return key

    def set_api_key(self, key: str) -> None:
        """Store the API key. A blank key removes the stored one."""
        key = key.strip()
        if not key:
            self.clear_api_key()
            return
        self._store.set(API_KEY_KEY, key)
        logger.debug("API key updated")

    def clear_api_key(self) -> None:
        self._store.delete(API_KEY_KEY)
        logger.debug("API key cleared")

    def get_temperature(self) -> float:
        """Return the stored temperature clamped to [0, 1].

        Falls back to the configured default when absent or unparseable.
        """
        raw = self._store.get(TEMPERATURE_KEY)
        if raw is None:
            return self._model.default_temperature
        try:
            value = float(raw)
        except ValueError:
            logger.warning("Ignoring invalid stored temperature '%s'", raw)
            return self._model.default_temperature
        if value != value:  # NaN
            return self._model.default_temperature
        return clamp_temperature(value)

    def set_temperature(self, value: float) -> float:
        """Clamp and persist the temperature as a one-decimal string.

        Returns the value actually stored.

        Raises:
            ValueError: If value is NaN.
        """
        if value != value:  # NaN
            msg = "temperature must be a number between 0.0 and 1.0"
            raise ValueError(msg)
        clamped = round(clamp_temperature(value), 1)
        self._store.set(TEMPERATURE_KEY, f"{clamped:.1f}")
        return clamped

    def client_config(self) -> ClientConfig:
        """Build an immutable snapshot for the analysis client."""
        return ClientConfig(
            api_key=self.get_api_key(),
            provider=self._model.provider,
            temperature=self.get_temperature(),
            model=self._model.model,
            thinking_budget=self._model.thinking_budget,
            output_language=self._model.output_language,
        )
