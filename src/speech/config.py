"""Speech client configuration models.

Pydantic models for validating client.yaml configuration.
Config errors surface at load time rather than on the first API call.
"""

import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator, model_validator

from vault.cipher import MIN_PBKDF2_ITERATIONS, PBKDF2_ITERATIONS

DEFAULT_VOICES: list[str] = ["Kore", "Puck", "Charon", "Fenrir", "Aoede", "Leda", "Orus", "Zephyr"]


class ApiConfig(BaseModel):
    """Remote speech service endpoint configuration.

    Attributes:
        base_url: API root, without trailing slash
        model: Speech generation model name
        timeout_s: Total timeout per HTTP request in seconds
    """

    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="API root URL",
    )
    model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Speech generation model",
        min_length=1,
    )
    timeout_s: float = Field(
        default=60.0,
        description="Per-request timeout in seconds",
        gt=0,
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure the URL is http(s) and strip any trailing slash."""
        if not v.startswith("https://") and not v.startswith("http://"):
            raise ValueError("API base_url must start with http:// or https://")
        return v.rstrip("/")


class RetryConfig(BaseModel):
    """Retry policy for 429 and 5xx responses.

    Attributes:
        max_retries: Total attempts before giving up
        initial_delay_ms: Delay after the first failed attempt
        backoff_factor: Multiplier applied to the delay after each failure
    """

    max_retries: int = Field(default=5, ge=1, le=20, description="Total attempts")
    initial_delay_ms: int = Field(default=1000, ge=0, description="First retry delay (ms)")
    backoff_factor: float = Field(default=2.0, ge=1.0, description="Delay multiplier")


class VoiceConfig(BaseModel):
    """Voice selection and input limits.

    Attributes:
        default_voice: Voice used when none is requested
        voices: Prebuilt voices the client accepts
        max_text_chars: Maximum characters per request
    """

    default_voice: str = Field(default="Kore", min_length=1)
    voices: list[str] = Field(default_factory=lambda: list(DEFAULT_VOICES), min_length=1)
    max_text_chars: int = Field(default=500, ge=1)

    @model_validator(mode="after")
    def validate_default_voice(self) -> "VoiceConfig":
        """Ensure the default voice is one of the accepted voices."""
        if self.default_voice not in self.voices:
            raise ValueError(
                f"default_voice '{self.default_voice}' is not in voices {self.voices}"
            )
        return self


class VaultConfig(BaseModel):
    """Encrypted credential storage configuration.

    Attributes:
        path: JSON store file
        storage_key: Key the encrypted blob is stored under
        kdf_iterations: PBKDF2 iteration count
        password_env: Environment variable consulted for the vault password
    """

    path: Path = Field(default=Path("~/.voice-vault/store.json"))
    storage_key: str = Field(default="apiKey", min_length=1)
    kdf_iterations: int = Field(default=PBKDF2_ITERATIONS, ge=MIN_PBKDF2_ITERATIONS)
    password_env: str = Field(default="VOICE_VAULT_PASSWORD", min_length=1)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json or text)
    """

    level: str = Field(default="INFO")
    format: str = Field(default="text")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Ensure log format is valid."""
        valid_formats = {"json", "text"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower


class ClientConfig(BaseModel):
    """Complete client configuration.

    Example:
        >>> config = ClientConfig.from_yaml(Path("configs/client.yaml"))
        >>> config.retry.max_retries
        5
    """

    api: ApiConfig = Field(default_factory=ApiConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    vault: VaultConfig = Field(default_factory=VaultConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "ClientConfig":
        """Load configuration from YAML file with environment overrides.

        Environment variables (applied after the file is read):
            TTS_API_URL, TTS_MODEL, TTS_VOICE, VOICE_VAULT_PATH, LOG_LEVEL

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated configuration

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If the file does not hold a mapping
            ValidationError: If validation fails
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        # An empty section (`api:` with no keys) means defaults
        data = {section: value for section, value in data.items() if value is not None}

        _apply_env_overrides(data)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_with_defaults(cls, path: Path | None = None) -> "ClientConfig":
        """Load configuration from YAML or use defaults if file doesn't exist.

        Environment overrides apply in both cases.
        """
        if path is not None and path.exists():
            return cls.from_yaml(path)

        data: dict[str, Any] = {}
        _apply_env_overrides(data)
        return cls.model_validate(data)


def _apply_env_overrides(data: dict[str, Any]) -> None:
    overrides = {
        "TTS_API_URL": ("api", "base_url"),
        "TTS_MODEL": ("api", "model"),
        "TTS_VOICE": ("voice", "default_voice"),
        "VOICE_VAULT_PATH": ("vault", "path"),
        "LOG_LEVEL": ("logging", "level"),
    }
    for env_var, (section, field) in overrides.items():
        if value := os.getenv(env_var):
            data[section] = data.get(section) or {}
            data[section][field] = value
