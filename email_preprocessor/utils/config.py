"""
Configuration Management Module
Handles loading and validation of environment variables and settings
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv


VALID_LOG_FORMATS = ("text", "json")
VALID_HEADING_STYLES = ("ATX", "ATX_CLOSED", "UNDERLINED", "SETEXT")


class ConfigurationError(ValueError):
    """Raised when a configuration value is missing or out of range"""


@dataclass
class FeatureConfig:
    """Configuration for feature extraction"""
    context_max_length: int
    markdown_heading_style: str
    markdown_strip_tags: List[str]


@dataclass
class SystemConfig:
    """Configuration for system settings"""
    log_level: str
    log_format: str
    log_file: Optional[str]


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        A missing env file is not an error; defaults and the process
        environment are used instead.

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.features = self._load_feature_config()
        self.system = self._load_system_config()

    def _load_feature_config(self) -> FeatureConfig:
        """Load feature extraction configuration"""
        return FeatureConfig(
            context_max_length=self._get_int("CONTEXT_MAX_LENGTH", 512),
            markdown_heading_style=os.getenv("MARKDOWN_HEADING_STYLE", "ATX").strip().upper(),
            markdown_strip_tags=self._parse_list(
                os.getenv("MARKDOWN_STRIP_TAGS", "head,script,style")
            ),
        )

    def _load_system_config(self) -> SystemConfig:
        """Load system configuration"""
        return SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text").strip().lower(),
            log_file=os.getenv("LOG_FILE") or None,
        )

    @staticmethod
    def _parse_list(value: str) -> List[str]:
        """Normalize a comma or newline separated string into a clean list."""
        if not value:
            return []
        return [
            item.strip().lower()
            for item in value.replace("\n", ",").split(",")
            if item.strip()
        ]

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Read an integer environment variable"""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}")

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.features.context_max_length <= 0:
            raise ConfigurationError("CONTEXT_MAX_LENGTH must be positive")

        if self.features.markdown_heading_style not in VALID_HEADING_STYLES:
            raise ConfigurationError(
                f"MARKDOWN_HEADING_STYLE must be one of {', '.join(VALID_HEADING_STYLES)}"
            )

        if self.system.log_format not in VALID_LOG_FORMATS:
            raise ConfigurationError(
                f"LOG_FORMAT must be one of {', '.join(VALID_LOG_FORMATS)}"
            )

        return True
