"""Shared dependencies for API routes.

This module provides singleton instances for the API routes. All shared state
is initialized here.
"""

import logging

from ..configuration import ConfigurationService

logger = logging.getLogger(__name__)

# Singleton instances
_configuration_service: ConfigurationService | None = None


def get_configuration_service() -> ConfigurationService:
    """Get the configuration service singleton."""
    global _configuration_service
    if _configuration_service is None:
        _configuration_service = ConfigurationService()
        logger.info(f"Configuration service initialized (output_dir: {_configuration_service.output_dir})")
    return _configuration_service
