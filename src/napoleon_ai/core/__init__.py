"""Core utilities for configuration, logging, models and shared errors."""

from .config import AppSettings, BoostSettings, ScoringSettings, load_app_settings
from .interfaces import AnalyzerError, ValidationError
from .logging import configure_logging

__all__ = [
    "AnalyzerError",
    "AppSettings",
    "BoostSettings",
    "ScoringSettings",
    "ValidationError",
    "configure_logging",
    "load_app_settings",
]
