"""Configuration package exports."""

from .loader import CONFIG_FILENAME, HOME_ENV_VAR, ConfigLocator, ConfigRepository
from .models import LookupConfig, ProviderConfig

__all__ = [
    "CONFIG_FILENAME",
    "ConfigLocator",
    "ConfigRepository",
    "HOME_ENV_VAR",
    "LookupConfig",
    "ProviderConfig",
]
