"""
Supabase client factory.

The client is created on first use rather than at import time so that modules
importing the store can load without credentials (tests, schema bootstrap).
"""

from typing import Optional

from supabase import Client, create_client

from pitchside.core.config import Settings
from pitchside.core.exceptions import ConfigurationError
from pitchside.core.logger import setup_logger

logger = setup_logger("pitchside.db.supabase_client")


def get_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client from the service-role credentials.

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing.
    """
    url: Optional[str] = settings.SUPABASE_URL
    key: Optional[str] = settings.SUPABASE_SERVICE_ROLE_KEY
    if not url or not key:
        raise ConfigurationError(
            "Supabase URL or service role key is not configured. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
        )
    logger.debug(f"Creating Supabase client for {url}")
    return create_client(url, key)
