"""
Configuration loader for the billing contracts plugin.

Loads settings from contracts_config.yaml and provides typed access
to all configuration sections.
"""
import os
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml


# Default config shipped alongside the package
DEFAULT_CONFIG_PATH = Path(__file__).parent / "contracts_config.yaml"
CONFIG_PATH_ENV = "BILLING_CONTRACTS_CONFIG"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class ContractsConfig:
    """
    Configuration manager for the billing contracts plugin.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        env_path = os.environ.get(CONFIG_PATH_ENV)
        self._config_path = config_path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

    @property
    def path(self) -> Path:
        return self._config_path

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Billable Activities
    # =========================================================================

    @property
    def billable_activities(self) -> dict:
        """Settings that decide which time entry activities are billable."""
        return self._config.get("billable_activities", {})

    @property
    def billable_custom_field(self) -> str:
        """Name of the activity custom field carrying the billable flag."""
        return self.billable_activities.get("custom_field", "billable")

    @property
    def billable_value(self) -> str:
        """Custom field value marking an activity as billable."""
        return str(self.billable_activities.get("billable_value", "true"))

    def is_billable(self, custom_values: Optional[dict]) -> bool:
        """
        Check an activity's custom values against the billable setting.

        Args:
            custom_values: Mapping of custom field name to string value

        Returns:
            True if the billable custom field holds the billable value
        """
        if not custom_values:
            return False
        value = custom_values.get(self.billable_custom_field)
        if value is None:
            return False
        return str(value).strip().lower() == self.billable_value.lower()

    # =========================================================================
    # Retainers
    # =========================================================================

    @property
    def retainer(self) -> dict:
        """Retainer deliverable configuration."""
        return self._config.get("retainer", {})

    @property
    def count_partial_months(self) -> bool:
        """Whether a month only partly covered by a retainer counts as a full month."""
        return self.retainer.get("count_partial_months", True)

    # =========================================================================
    # Statuses
    # =========================================================================

    @property
    def statuses(self) -> list[str]:
        """Allowed contract and deliverable statuses."""
        return self._config.get("statuses", ["open", "locked", "closed"])

    @property
    def default_status(self) -> str:
        return self.statuses[0] if self.statuses else "open"

    # =========================================================================
    # Currency
    # =========================================================================

    @property
    def currency_config(self) -> dict:
        """Currency formatting configuration."""
        return self._config.get("currency", {
            "symbol": "$",
            "decimal_places": 2,
            "thousands_separator": ","
        })

    @property
    def currency_symbol(self) -> str:
        return self.currency_config.get("symbol", "$")

    @property
    def thousands_separator(self) -> str:
        return self.currency_config.get("thousands_separator", ",")

    @property
    def decimal_places(self) -> int:
        return int(self.currency_config.get("decimal_places", 2))

    # =========================================================================
    # Database
    # =========================================================================

    @property
    def database(self) -> dict:
        return self._config.get("database", {})

    @property
    def database_url(self) -> str:
        return self.database.get("url", "sqlite:///./contracts.db")

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> ContractsConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        ContractsConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return ContractsConfig(path)


def reload_config() -> ContractsConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
