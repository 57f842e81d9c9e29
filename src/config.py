"""Configuration loader for the Token Stream Player."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class PlaybackConfig(BaseModel):
    """Configuration for tokenization and autoplay."""

    encoding_name: str = Field(..., description="tiktoken encoding name (e.g., 'o200k_base')", min_length=1)
    speeds_ms: list[int] = Field(..., description="Allowed autoplay tick intervals in milliseconds", min_length=1)
    default_speed_ms: int = Field(..., description="Initial tick interval, must be one of speeds_ms")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_speeds(self) -> "PlaybackConfig":
        if any(speed <= 0 for speed in self.speeds_ms):
            raise ValueError(f"speeds_ms must be positive, got {self.speeds_ms}")
        if self.default_speed_ms not in self.speeds_ms:
            raise ValueError(f"default_speed_ms {self.default_speed_ms} is not one of speeds_ms {self.speeds_ms}")
        return self


class ShareConfig(BaseModel):
    """Configuration for shareable links."""

    base_url: str = Field(..., description="Address of the player that share links point to", min_length=1)
    query_param: str = Field("md", description="Query parameter carrying the share token", min_length=1)
    compression_level: int = Field(9, description="zlib compression level (0-9)", ge=0, le=9)

    model_config = ConfigDict(frozen=True, extra="forbid")


def _format_validation_error(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())


class Config:
    """Configuration class that loads and provides access to config.yaml."""

    def __init__(self, config_path: str | Path) -> None:
        """Initialize the Config by loading the YAML file.

        Args:
            config_path: Path to the config.yaml file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If required sections are missing from the config.
            ValueError: If a section is invalid or missing required fields.
        """
        self.config_path = Path(config_path)
        self._load(self.config_path)
        self._playback = self._validate_playback()
        self._share = self._validate_share()

    def _load(self, config_path: Path) -> None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            self._data = yaml.safe_load(f)

        # Handle empty or None YAML files
        if self._data is None:
            raise KeyError("Missing required key 'playback' in config file")
        if not isinstance(self._data, dict):
            raise ValueError("Config file must contain a mapping at the top level")

    def _validate_playback(self) -> PlaybackConfig:
        """Validate the playback section.

        Raises:
            KeyError: If the playback section is missing.
            ValueError: If the playback section is invalid.
        """
        if "playback" not in self._data:
            raise KeyError("Missing required key 'playback' in config file")
        try:
            return PlaybackConfig.model_validate(self._data["playback"])
        except ValidationError as e:
            raise ValueError(f"Playback configuration validation failed: {_format_validation_error(e)}") from e

    def _validate_share(self) -> ShareConfig:
        """Validate the share section.

        Raises:
            KeyError: If the share section is missing.
            ValueError: If the share section is invalid.
        """
        if "share" not in self._data:
            raise KeyError("Missing required key 'share' in config file")
        try:
            return ShareConfig.model_validate(self._data["share"])
        except ValidationError as e:
            raise ValueError(f"Share configuration validation failed: {_format_validation_error(e)}") from e

    def get_playback_config(self) -> PlaybackConfig:
        """Get playback configuration."""
        return self._playback

    def get_share_config(self) -> ShareConfig:
        """Get share link configuration."""
        return self._share

    def getEncodingName(self) -> str:
        """Get the tiktoken encoding used for tokenization."""
        return self._playback.encoding_name

    def getConfigPath(self) -> Path:
        """Get the path to config.yaml."""
        return self.config_path
