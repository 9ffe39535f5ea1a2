from .loader import (
    ConfigLoadFailure,
    ConfigLoadResult,
    ConfigLoadSuccess,
    load_group_config,
    registry_or_empty,
)
from .settings import SETTINGS_SECTION, ClassifierSettings, load_settings

__all__ = [
    "ClassifierSettings",
    "ConfigLoadFailure",
    "ConfigLoadResult",
    "ConfigLoadSuccess",
    "SETTINGS_SECTION",
    "load_group_config",
    "load_settings",
    "registry_or_empty",
]
