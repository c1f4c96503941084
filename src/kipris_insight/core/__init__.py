"""Core module for KIPRIS Insight."""

from kipris_insight.core.config import get_config, reload_config, KiprisConfig
from kipris_insight.core.logging_setup import configure_logging
from kipris_insight.core.status import RegistrationStatus

__all__ = [
    "get_config",
    "reload_config",
    "KiprisConfig",
    "configure_logging",
    "RegistrationStatus",
]
