"""Environment configuration setup utilities.

This module provides functions for loading environment variables from .env files
and configuring the gateway for local development.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from binance_gateway.helpers import DEFAULT_API_URL, DEFAULT_STREAM_URL

log = logging.getLogger(__name__)


def setup_environment() -> tuple[str, str, str | None, str | None]:
    """Load and return environment variables for the Binance gateway.

    Loads environment variables from a .env file if present, otherwise falls
    back to system environment variables. Reads environment-specific variables
    based on the ENVIRONMENT variable (defaults to 'production').

    Returns:
        Tuple:
            - api_endpoint: The REST API base URL
            - stream_endpoint: The stream base URL
            - api_key: The API key, or None when unset
            - api_secret: The API secret, or None when unset

    """
    env_file_path = Path(".env")
    if env_file_path.exists():
        log.info("Loading environment variables from .env file")
        load_dotenv(env_file_path)
    else:
        log.info(".env file not found. Falling back to Bash Environment variables.")

    environment = os.getenv("ENVIRONMENT", "production").lower()
    log.info("Using %s environment", environment)
    suffix = environment.upper()

    api_endpoint = os.environ.get(f"BINANCE_API_ENDPOINT_{suffix}", DEFAULT_API_URL)
    stream_endpoint = os.environ.get(
        f"BINANCE_STREAM_ENDPOINT_{suffix}", DEFAULT_STREAM_URL
    )
    api_key = os.environ.get(f"BINANCE_API_KEY_{suffix}") or None
    api_secret = os.environ.get(f"BINANCE_API_SECRET_{suffix}") or None

    return api_endpoint, stream_endpoint, api_key, api_secret
