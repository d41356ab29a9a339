"""API configuration adapter.

Bridges the centralized dbauth_config settings with the API layer.
"""

from dbauth_config.settings import Settings, get_settings


def get_api_settings() -> Settings:
    """Get settings from centralized configuration.

    Tests and embedding applications override this dependency.
    """
    return get_settings()
