"""BugBlaze configuration.

Typed configuration for every command. The user-editable part lives in a
small JSON file (``.bugblazerc.json`` in the working directory); model
settings and the license backend come from defaults or environment
variables. A single ``AppConfig`` is loaded once per CLI invocation and
passed explicitly to each command handler.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from bugblaze.errors import ConfigError, ConfigMissing
from bugblaze.utils import save_json

CONFIG_FILENAME = ".bugblazerc.json"

# Keys that ``bugblaze config set`` accepts.
SETTABLE_KEYS = ("apikey", "licensekey")

# Fields persisted to the JSON store; everything else is runtime-only.
_STORED_FIELDS = {"apikey", "licensekey", "is_premium", "email"}


def default_config_path() -> Path:
    """Return the config file location for the current working directory."""
    return Path.cwd() / CONFIG_FILENAME


class GroqConfig(BaseModel):
    """Settings for the Groq chat-completions endpoint."""

    url: str = Field(default="https://api.groq.com/openai/v1")
    model: str = Field(default="llama3-8b-8192")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=300, ge=1)
    codebase_max_tokens: int = Field(
        default=4096, ge=1, description="Token budget for generate codebase"
    )
    timeout: int = Field(default=120, ge=10, description="Per-request timeout in seconds")


class AppConfig(BaseModel):
    """Configuration threaded through every BugBlaze command.

    ``is_premium`` is stored as ``isPremium`` so files written by older
    releases keep working.
    """

    model_config = ConfigDict(populate_by_name=True)

    apikey: str = Field(default="")
    licensekey: str = Field(default="")
    is_premium: bool = Field(default=False, alias="isPremium")
    email: str = Field(default="")
    groq: GroqConfig = Field(default_factory=GroqConfig)
    backend_url: str = Field(default="", description="License verification endpoint")
    config_path: Path = Field(default_factory=default_config_path)

    # GROQ_API_KEY fallback; used for requests, never written to the store.
    _env_apikey: str = PrivateAttr(default="")

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    @property
    def effective_apikey(self) -> str:
        """The stored key, or the environment key when none is stored."""
        return self.apikey.strip() or self._env_apikey.strip()

    @property
    def has_apikey(self) -> bool:
        return bool(self.effective_apikey)

    def require_apikey(self) -> str:
        """Return the API key or raise ``ConfigMissing``."""
        if not self.has_apikey:
            raise ConfigMissing()
        return self.effective_apikey

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def stored_values(self) -> dict[str, Any]:
        """Return the fields persisted to the JSON store, using file key names."""
        data = self.model_dump(include=_STORED_FIELDS, by_alias=True)
        return {key: value for key, value in data.items() if value not in ("", None)}

    def save(self, path: Path | None = None) -> Path:
        """Persist the stored fields to the JSON config file.

        Returns:
            The path where the file was written.
        """
        target = path or self.config_path
        save_json(self.stored_values(), target)
        return target

    def set_value(self, key: str, value: str) -> None:
        """Set one user-settable key (``apikey`` or ``licensekey``)."""
        if key not in SETTABLE_KEYS:
            raise ValueError(f"Unknown config key: {key}")
        setattr(self, key, value)

    @classmethod
    def load(cls, path: Path | None = None) -> "AppConfig":
        """Load configuration from the JSON store and the environment.

        A missing file yields defaults. Environment variables fill gaps:
        ``GROQ_API_KEY`` (used when no key is stored, and never saved), ``BUGBLAZE_MODEL``,
        ``BUGBLAZE_TIMEOUT`` and ``BUGBLAZE_BACKEND_URL``.

        Raises:
            ConfigError: If the file exists but is not valid JSON or does not
                match the expected shape.
        """
        target = path or default_config_path()
        stored = cls.read_raw(target) or {}

        groq_kwargs: dict[str, Any] = {}
        if os.environ.get("BUGBLAZE_MODEL"):
            groq_kwargs["model"] = os.environ["BUGBLAZE_MODEL"]
        if os.environ.get("BUGBLAZE_TIMEOUT", "").isdigit():
            groq_kwargs["timeout"] = int(os.environ["BUGBLAZE_TIMEOUT"])

        values = {
            key: value
            for key, value in stored.items()
            if key in ("apikey", "licensekey", "isPremium", "email")
        }
        try:
            config = cls(
                **values,
                groq=GroqConfig(**groq_kwargs),
                backend_url=os.environ.get("BUGBLAZE_BACKEND_URL", ""),
                config_path=target,
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid config file {target}: {exc}") from exc
        config._env_apikey = os.environ.get("GROQ_API_KEY", "")
        return config

    @staticmethod
    def delete(path: Path | None = None) -> bool:
        """Remove the config file. Returns ``False`` if there was none."""
        target = path or default_config_path()
        if not target.exists():
            return False
        target.unlink()
        return True

    @staticmethod
    def read_raw(path: Path | None = None) -> dict[str, Any] | None:
        """Return the raw stored mapping, or ``None`` when no file exists."""
        target = path or default_config_path()
        if not target.exists():
            return None
        try:
            data = json.loads(target.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(
                f"Could not read config file {target}: {exc}",
                hint="Delete it with: bugblaze config delete",
            ) from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {target} must contain a JSON object.")
        return data
