"""Configuration management for the refund desk."""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml

from ..models.form import FORM_VARIANTS
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class FormConfig:
    """Form engine configuration."""
    max_file_size_bytes: int = 5 * 1024 * 1024
    accepted_extensions: List[str] = field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".pdf"]
    )
    case_id_prefix: str = "RFD"
    case_id_length: int = 5
    sla_hours: int = 48
    variant: str = "refund"


@dataclass
class RotationConfig:
    """Timer periods for rotation groups and transient flags."""
    tick_ms: int = 6000
    idle_ms: int = 12000
    copied_flash_ms: int = 2000


@dataclass
class PreviewConfig:
    """Image preview configuration."""
    max_dimension: int = 480


@dataclass
class StorageConfig:
    """Storage paths configuration."""
    history_path: str = "data/history.json"
    history_key: str = "refund-history"
    history_limit: int = 20
    disputes_path: str = "data/disputes.yaml"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s %(component)s] %(message)s"
    file: str = ""


@dataclass
class Config:
    """Main configuration class."""
    form: FormConfig = field(default_factory=FormConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "Config":
        """
        Load configuration from file and environment variables.

        Environment variables override config file values:
        - LOG_LEVEL
        - MAX_FILE_SIZE_BYTES
        - HISTORY_PATH
        - DISPUTES_PATH
        - FORM_VARIANT

        A missing file yields the built-in defaults (still subject to the
        environment overrides).

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        if not os.path.exists(config_path):
            logger.warning(f"Config file not found at {config_path}; using defaults")
            config_data: Dict[str, Any] = {}
        else:
            try:
                with open(config_path, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError.invalid(config_path, e) from e
            if not isinstance(config_data, dict):
                raise ConfigurationError.invalid(
                    config_path, TypeError("top-level YAML value must be a mapping")
                )

        try:
            return cls._from_dict(config_data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError.invalid(config_path, e) from e

    @classmethod
    def _from_dict(cls, config_data: Dict[str, Any]) -> "Config":
        form_data = config_data.get("form", {}) or {}
        rotation_data = config_data.get("rotation", {}) or {}
        preview_data = config_data.get("preview", {}) or {}
        storage_data = config_data.get("storage", {}) or {}
        logging_data = config_data.get("logging", {}) or {}

        form_config = FormConfig(**form_data)
        form_config.max_file_size_bytes = int(
            os.getenv("MAX_FILE_SIZE_BYTES", form_config.max_file_size_bytes)
        )
        form_config.variant = os.getenv("FORM_VARIANT", form_config.variant)

        rotation_config = RotationConfig(**rotation_data)
        preview_config = PreviewConfig(**preview_data)

        storage_config = StorageConfig(**storage_data)
        storage_config.history_path = os.getenv("HISTORY_PATH", storage_config.history_path)
        storage_config.disputes_path = os.getenv("DISPUTES_PATH", storage_config.disputes_path)

        logging_config = LoggingConfig(**logging_data)
        logging_config.level = os.getenv("LOG_LEVEL", logging_config.level)

        if form_config.max_file_size_bytes <= 0:
            raise ValueError("form.max_file_size_bytes must be positive")
        if rotation_config.tick_ms <= 0 or rotation_config.idle_ms <= 0:
            raise ValueError("rotation periods must be positive")
        if storage_config.history_limit < 1:
            raise ValueError("storage.history_limit must be at least 1")
        if form_config.variant not in FORM_VARIANTS:
            raise ValueError(
                f"form.variant must be one of {sorted(FORM_VARIANTS)}, got '{form_config.variant}'"
            )

        return cls(
            form=form_config,
            rotation=rotation_config,
            preview=preview_config,
            storage=storage_config,
            logging=logging_config,
        )
