"""
equityvest Configuration Manager

Centralized configuration supporting:
- Environment-based configs (development/staging/production)
- Config file loading (YAML/JSON)
- Explicit override support
- Environment variable support (EQUITYVEST_*)
- Config validation
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
ENV_PREFIX = "EQUITYVEST_"


class Environment(Enum):
    """Environment types"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class VestingConfig:
    """Vesting engine and custodial pool settings"""
    admin: str = ""
    custody_address: str = ""
    token_name: str = "Equity Token"
    token_symbol: str = "EQT"
    # Minted to the custodial pool when the system is built
    pool_supply: int = 0

    def validate(self):
        if not self.admin:
            raise ConfigurationError("vesting.admin cannot be empty")
        if not self.custody_address:
            raise ConfigurationError("vesting.custody_address cannot be empty")
        if self.admin.lower() == self.custody_address.lower():
            raise ConfigurationError("vesting.admin and vesting.custody_address must differ")
        if not self.token_symbol:
            raise ConfigurationError("vesting.token_symbol cannot be empty")
        if not isinstance(self.pool_supply, int) or self.pool_supply < 0:
            raise ConfigurationError(
                f"Invalid vesting.pool_supply: {self.pool_supply}. Must be a non-negative integer"
            )


@dataclass
class LotteryConfig:
    """Lottery pool settings"""
    enabled: bool = True
    capacity: int = 10
    ticket_price: int = 100
    custody_address: str = ""

    def validate(self):
        if self.enabled and not self.custody_address:
            raise ConfigurationError("lottery.custody_address cannot be empty when the lottery is enabled")
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity < 2:
            raise ConfigurationError(f"Invalid lottery.capacity: {self.capacity}. Must be >= 2")
        if (
            isinstance(self.ticket_price, bool)
            or not isinstance(self.ticket_price, int)
            or self.ticket_price <= 0
        ):
            raise ConfigurationError(
                f"Invalid lottery.ticket_price: {self.ticket_price}. Must be a positive integer"
            )


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    log_file: str = ""
    enable_console: bool = True

    def validate(self):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if str(self.level).upper() not in valid_levels:
            raise ConfigurationError(f"Invalid log level: {self.level}. Must be one of {valid_levels}")


class ConfigManager:
    """
    Configuration Manager for equityvest

    Sources, highest priority first:
    1. Explicit overrides passed to the constructor ("section.key": value)
    2. Environment variables (EQUITYVEST_SECTION_KEY)
    3. Environment-specific config file
    4. Default config file
    5. Built-in defaults
    """

    def __init__(
        self,
        environment: Optional[str] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self.environment = self._determine_environment(environment)
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self.overrides = overrides or {}

        self.vesting = VestingConfig()
        self.lottery = LotteryConfig()
        self.logging = LoggingConfig()
        self.classes: List[Dict[str, Any]] = []
        self._raw_config: Dict[str, Any] = {}

        self._load_configuration()

    def _determine_environment(self, environment: Optional[str]) -> Environment:
        env_str = (environment or os.getenv(f"{ENV_PREFIX}ENVIRONMENT", "development")).lower()
        try:
            return Environment(env_str)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown environment: {env_str}",
                details={"valid": [env.value for env in Environment]},
            ) from exc

    def _load_configuration(self):
        """Load configuration from all sources with proper precedence"""
        default_config = self._load_config_file("default")
        env_config = self._load_config_file(self.environment.value)
        merged_config = self._merge_configs(default_config, env_config)
        merged_config = self._apply_env_variables(merged_config)
        merged_config = self._apply_overrides(merged_config)

        self._raw_config = merged_config
        self._parse_configuration(merged_config)
        self._validate_configuration()

        logger.debug(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "environment": self.environment.value,
                "config_dir": str(self.config_dir),
                "classes": len(self.classes),
            },
        )

    def _load_config_file(self, filename: str) -> Dict[str, Any]:
        """
        Load configuration from YAML or JSON file

        Args:
            filename: Config filename (without extension)

        Returns:
            Configuration dictionary, empty if no file exists
        """
        yaml_path = self.config_dir / f"{filename}.yaml"
        if yaml_path.exists():
            with open(yaml_path, "r", encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigurationError(f"Invalid YAML in {yaml_path}: {exc}") from exc
            if not isinstance(data, dict):
                raise ConfigurationError(f"{yaml_path} must contain a mapping")
            return data

        json_path = self.config_dir / f"{filename}.json"
        if json_path.exists():
            with open(json_path, "r", encoding="utf-8") as f:
                try:
                    return json.load(f)
                except json.JSONDecodeError as exc:
                    raise ConfigurationError(f"Invalid JSON in {json_path}: {exc}") from exc

        return {}

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_variables(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides

        Environment variables format:
        EQUITYVEST_SECTION_KEY=value

        Example:
        EQUITYVEST_VESTING_ADMIN=0xadmin
        EQUITYVEST_LOTTERY_CAPACITY=20
        """
        result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in config.items()}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            if key == f"{ENV_PREFIX}ENVIRONMENT":
                continue

            parts = key[len(ENV_PREFIX):].lower().split("_")
            if len(parts) < 2:
                continue

            section = parts[0]
            config_key = "_".join(parts[1:])
            if section not in ("vesting", "lottery", "logging"):
                continue

            section_values = result.get(section)
            if not isinstance(section_values, dict):
                section_values = {}
                result[section] = section_values
            section_values[config_key] = self._parse_env_value(value)

        return result

    def _parse_env_value(self, value: str) -> Union[str, int, bool]:
        """Parse environment variable value to appropriate type"""
        try:
            return int(value)
        except ValueError:
            pass

        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        return value

    def _apply_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply explicit "section.key" overrides"""
        result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in config.items()}

        for key, value in self.overrides.items():
            parts = key.split(".")
            if len(parts) == 1:
                result[key] = value
            elif len(parts) == 2:
                section, config_key = parts
                if not isinstance(result.get(section), dict):
                    result[section] = {}
                result[section][config_key] = value
            else:
                raise ConfigurationError(f"Override key too deep: {key}")

        return result

    def _parse_configuration(self, config: Dict[str, Any]):
        """Parse merged configuration into typed objects"""
        self.vesting = self._build_section(VestingConfig, config.get("vesting"))
        self.lottery = self._build_section(LotteryConfig, config.get("lottery"))
        self.logging = self._build_section(LoggingConfig, config.get("logging"))

        classes = config.get("classes") or []
        if not isinstance(classes, list) or not all(isinstance(c, dict) for c in classes):
            raise ConfigurationError("classes must be a list of mappings")
        self.classes = [dict(c) for c in classes]

    def _build_section(self, section_cls, values: Optional[Dict[str, Any]]):
        if values is None:
            return section_cls()
        if not isinstance(values, dict):
            raise ConfigurationError(f"Section for {section_cls.__name__} must be a mapping")
        known = {f.name for f in fields(section_cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown keys for {section_cls.__name__}: {sorted(unknown)}"
            )
        return section_cls(**values)

    def _validate_configuration(self):
        self.vesting.validate()
        self.lottery.validate()
        self.logging.validate()

        if self.lottery.enabled:
            # Lottery deposits must never land in the vesting payout pool
            lottery_pot = self.lottery.custody_address.strip().lower()
            reserved = {
                "vesting.custody_address": self.vesting.custody_address,
                "vesting.admin": self.vesting.admin,
            }
            for name, address in reserved.items():
                if lottery_pot == address.strip().lower():
                    raise ConfigurationError(
                        f"lottery.custody_address must differ from {name}",
                        details={"address": lottery_pot},
                    )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dotted path (e.g. "lottery.capacity")
        """
        value: Any = self._raw_config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment.value,
            "vesting": asdict(self.vesting),
            "lottery": asdict(self.lottery),
            "logging": asdict(self.logging),
            "classes": [dict(c) for c in self.classes],
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment.value})"
