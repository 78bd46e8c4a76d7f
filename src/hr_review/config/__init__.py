"""Settings for the review console."""

from hr_review.config.settings import (
    DEFAULT_SETTINGS_PATH,
    ReviewSettings,
    load_settings,
    save_settings,
    settings_from_mapping,
)

__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "ReviewSettings",
    "load_settings",
    "save_settings",
    "settings_from_mapping",
]
