"""Configuration management for remuxarr."""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class StripMode(str, Enum):
    """Which unwanted tracks to remove from the container."""

    NONE = "none"
    STRIP_SUBTITLES = "strip_subtitles"
    STRIP_AUDIO = "strip_audio"
    STRIP_BOTH = "strip_both"


class ExtractMode(str, Enum):
    """How to handle extracting subtitle tracks to sidecar files."""

    NONE = "none"
    EXTRACT_ONLY = "extract_only"  # Keep subtitles in the container
    EXTRACT_AND_REMUX = "extract_and_remux"  # Remove extracted subtitles from the container


class OCRMode(str, Enum):
    """OCR engine used for image based subtitles."""

    NONE = "none"
    TESSERACT = "tesseract"
    NOCR = "nocr"


class RemuxPolicy(BaseModel):
    """Track handling policy applied to every container."""

    whitelisted_languages: List[str] = Field(
        default=["eng"], description="Languages to retain and process"
    )
    keep_default_track: bool = Field(
        default=True, description="Never strip default, forced or original tracks"
    )
    strip_mode: StripMode = Field(default=StripMode.NONE, description="Track stripping mode")
    extract_mode: ExtractMode = Field(
        default=ExtractMode.NONE, description="Subtitle extraction mode"
    )
    extract_only_text_subs: bool = Field(
        default=True, description="Do not extract image based subtitle tracks"
    )
    ocr_mode: OCRMode = Field(default=OCRMode.NONE, description="OCR engine for image subtitles")
    ocr_always: bool = Field(
        default=False, description="OCR subtitles even when they are already text"
    )

    @field_validator("whitelisted_languages", mode="before")
    @classmethod
    def split_languages(cls, v: Any) -> Any:
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            return [lang.strip() for lang in v.split(",") if lang.strip()]
        return v

    @property
    def strips_audio(self) -> bool:
        return self.strip_mode in (StripMode.STRIP_AUDIO, StripMode.STRIP_BOTH)

    @property
    def strips_subtitles(self) -> bool:
        return self.strip_mode in (StripMode.STRIP_SUBTITLES, StripMode.STRIP_BOTH)

    def is_whitelisted(self, language: Optional[str]) -> bool:
        # Tags are compared verbatim, no normalization
        return language in self.whitelisted_languages


class ToolsConfig(BaseModel):
    """External tool locations and timeouts."""

    mkvmerge: str = Field(default="mkvmerge", description="mkvmerge executable")
    mkvextract: str = Field(default="mkvextract", description="mkvextract executable")
    subtitleedit: str = Field(default="subtitleedit", description="SubtitleEdit executable")
    probe_timeout: int = Field(default=30, description="Probe timeout in seconds")
    extract_timeout: int = Field(default=1800, description="Extraction timeout in seconds")
    ocr_timeout: int = Field(default=3600, description="Per-track OCR timeout in seconds")
    mux_timeout: int = Field(default=3600, description="Remux timeout in seconds")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="info", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class ExecutionConfig(BaseModel):
    """Execution configuration."""

    dry_run: bool = Field(default=False, description="Decide and report without touching files")


class Config(BaseModel):
    """Main configuration model."""

    policy: RemuxPolicy = Field(default_factory=RemuxPolicy, description="Track policy")
    tools: ToolsConfig = Field(default_factory=ToolsConfig, description="External tools")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig, description="Execution configuration"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively replace ${VAR_NAME} with os.environ['VAR_NAME']."""
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values."""
        return cls()


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config.from_defaults()

    return Config.from_yaml(path)
