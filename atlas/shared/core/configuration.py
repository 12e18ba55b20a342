"""
Configuration Management System for Atlas

This module provides a centralized configuration system that supports a 4-tier
precedence hierarchy: environment → project → user → system defaults.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config" / "settings"


class ValidationLevel(Enum):
    """Configuration validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class ServicesConfig(BaseModel):
    """Remote service endpoints"""
    model_config = ConfigDict(extra='forbid')

    countries_base_url: str = Field(default="https://restcountries.com/v3.1", description="Country lookup API")
    rates_base_url: str = Field(default="https://api.frankfurter.app", description="Currency conversion API")
    timeout: float = Field(default=10.0, ge=0.5, le=120.0, description="Request timeout (seconds)")
    user_agent: str = Field(default="atlas/1.0", description="User-Agent header sent to both services")

    @field_validator("countries_base_url", "rates_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class RosterConfig(BaseModel):
    """Country roster settings"""
    model_config = ConfigDict(extra='forbid')

    initial_countries: List[str] = Field(
        default_factory=lambda: ["Brazil", "Canada", "United Kingdom", "Portugal"],
        description="Names looked up when the dashboard mounts",
    )


class ConverterConfig(BaseModel):
    """Currency converter settings"""
    model_config = ConfigDict(extra='forbid')

    currencies: List[str] = Field(
        default_factory=lambda: ["BRL", "USD", "EUR", "GBP", "CAD"],
        min_length=1,
        description="Codes offered by the source/target selectors",
    )
    default_amount: float = Field(default=1.0, ge=0.0)
    default_source: str = Field(default="BRL")
    default_target: str = Field(default="USD")
    error_message: str = Field(default="Conversion unavailable for this currency.")

    @field_validator("currencies")
    @classmethod
    def _normalize_codes(cls, codes: List[str]) -> List[str]:
        normalized: List[str] = []
        for code in codes:
            code = code.strip().upper()
            if code and code not in normalized:
                normalized.append(code)
        return normalized

    @model_validator(mode="after")
    def _defaults_in_currency_set(self) -> "ConverterConfig":
        self.default_source = self.default_source.strip().upper()
        self.default_target = self.default_target.strip().upper()
        for code in (self.default_source, self.default_target):
            if code not in self.currencies:
                raise ValueError(f"Default currency {code!r} is not in {self.currencies}")
        return self


class UIConfig(BaseModel):
    """UI Configuration"""
    model_config = ConfigDict(extra='forbid')

    dark_mode: bool = Field(default=False, description="Initial theme flag")
    page_title: str = Field(default="Countries and their information")
    log_feed_size: int = Field(default=100, ge=10, le=1000, description="Entries kept in the log feed")


class LoggingConfig(BaseModel):
    """Logging Configuration"""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(default="DEBUG", description="File handler level")
    console_level: str = Field(default="WARNING", description="Console handler level")
    log_dir: str = Field(default="logs", description="Directory for atlas.log")


class SystemConfig(BaseModel):
    """Complete system configuration"""
    model_config = ConfigDict(extra='forbid')

    services: ServicesConfig = Field(default_factory=ServicesConfig)
    roster: RosterConfig = Field(default_factory=RosterConfig)
    converter: ConverterConfig = Field(default_factory=ConverterConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    schema_version: int = Field(default=1, description="Configuration schema version")


# env var -> (section, key, type)
ENV_MAP: Dict[str, tuple] = {
    'ATLAS_COUNTRIES_URL': ('services', 'countries_base_url', str),
    'ATLAS_RATES_URL': ('services', 'rates_base_url', str),
    'ATLAS_HTTP_TIMEOUT': ('services', 'timeout', float),
    'ATLAS_INITIAL_COUNTRIES': ('roster', 'initial_countries', list),
    'ATLAS_CURRENCIES': ('converter', 'currencies', list),
    'ATLAS_DARK_MODE': ('ui', 'dark_mode', bool),
    'LOG_LEVEL': ('logging', 'level', str),
    'LOG_DIR': ('logging', 'log_dir', str),
}


class ConfigManager:
    """Centralized configuration manager with 4-tier precedence hierarchy"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self._system_config: Optional[SystemConfig] = None
        self._user_config: Optional[Dict[str, Any]] = None
        self._project_config: Optional[Dict[str, Any]] = None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {file_path}: top level is not a mapping")
            return {}
        return data

    def _save_yaml_file(self, file_path: Path, data: Dict[str, Any]) -> bool:
        """Save configuration to YAML file"""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
            return True
        except OSError as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def _load_system_defaults(self) -> SystemConfig:
        """Load system default configuration"""
        if self._system_config is None:
            defaults_dict = self._load_yaml_file(self.config_dir / "defaults.yaml")
            try:
                self._system_config = SystemConfig(**defaults_dict)
            except ValidationError as e:
                logger.warning(f"System defaults validation failed: {e}")
                self._system_config = SystemConfig()

        return self._system_config

    def _load_user_config(self) -> Dict[str, Any]:
        """Load user-level configuration"""
        if self._user_config is None:
            self._user_config = self._load_yaml_file(self.config_dir / "user.yaml")
        return self._user_config

    def _load_project_config(self) -> Dict[str, Any]:
        """Load project-specific configuration"""
        if self._project_config is None:
            self._project_config = self._load_yaml_file(self.config_dir / "project.yaml")
        return self._project_config

    def _merge_configs(self) -> Dict[str, Any]:
        """Merge configurations with precedence: env → project → user → system"""
        merged = self._load_system_defaults().model_dump()
        self._deep_merge(merged, self._load_user_config())
        self._deep_merge(merged, self._load_project_config())
        self._deep_merge(merged, self._get_env_overrides())
        return merged

    def _deep_merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Deep merge configuration dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables"""
        overrides: Dict[str, Any] = {}
        for env_key, (section, config_key, kind) in ENV_MAP.items():
            value = os.getenv(env_key)
            if value is None:
                continue

            if kind is float:
                try:
                    converted: Any = float(value)
                except ValueError:
                    logger.warning(f"Ignoring {env_key}={value!r}: not a number")
                    continue
            elif kind is bool:
                converted = value.lower() in ('true', '1', 'yes', 'on')
            elif kind is list:
                converted = [item.strip() for item in value.split(',') if item.strip()]
            else:
                converted = value

            overrides.setdefault(section, {})[config_key] = converted

        return overrides

    def get_config(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
        """Get merged configuration with validation"""
        merged_config = self._merge_configs()

        try:
            return SystemConfig(**merged_config)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ValueError(f"Configuration validation failed: {e}") from e
            logger.warning(f"Configuration validation failed, using defaults: {e}")
            return SystemConfig()

    def save_project_config(self, config_updates: Dict[str, Any]) -> bool:
        """Save project-specific configuration updates"""
        project_path = self.config_dir / "project.yaml"

        existing_config = self._load_yaml_file(project_path)
        self._deep_merge(existing_config, config_updates)

        success = self._save_yaml_file(project_path, existing_config)
        if success:
            # Force a reload on next access
            self._project_config = None

        return success

    def reload_config(self) -> None:
        """Clear cached configurations and reload from files"""
        self._system_config = None
        self._user_config = None
        self._project_config = None


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager
    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)
    return _config_manager


def get_config(validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
    """Get current system configuration"""
    return get_config_manager().get_config(validation_level)
