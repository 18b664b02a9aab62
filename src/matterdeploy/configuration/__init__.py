"""Configuration Service module for rendering and checking deployment documents."""

from .service import OUTPUT_FILENAMES, ConfigurationService
from .validator import YAMLValidator

__all__ = ["ConfigurationService", "OUTPUT_FILENAMES", "YAMLValidator"]
