"""
This module manages connection settings for a Breadboard board server.
Values come from explicit arguments first, then from the environment (a local
.env file is loaded without overriding variables that are already set).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

ENV_SERVER_URL = "BREADBOARD_SERVER_URL"
ENV_API_KEY = "BREADBOARD_API_KEY"
ENV_USER = "BREADBOARD_USER"
ENV_BOARD_ID = "BOARD_ID"
ENV_HTTP_DEBUG = "BREADBOARD_HTTP_DEBUG"

DEFAULT_TIMEOUT_S = 120.0


def load_env() -> None:
    """Load the nearest .env file into ``os.environ`` (existing values win)."""
    load_dotenv(find_dotenv(usecwd=True), override=False)


def get_required_env_var(name: str, error_message: str | None = None) -> str:
    """
    Read a required environment variable.

    Args:
        name: Variable name.
        error_message: Optional message for the raised error.

    Returns:
        The variable value (never empty).

    Raises:
        ValueError: If the variable is unset or empty.
    """
    value = os.getenv(name)
    if isinstance(value, str) and value:
        return value
    raise ValueError(error_message or f"{name} is not set")


def http_debug_enabled() -> bool:
    return os.getenv(ENV_HTTP_DEBUG, "").lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """
    Connection settings for one board server.
    """

    base_url: str
    api_key: str
    timeout_s: float = DEFAULT_TIMEOUT_S

    @staticmethod
    def from_env_or_value(
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> ClientConfig:
        """
        Build a ClientConfig from explicit values, falling back to the environment.

        Args:
            base_url: Board server URL. Defaults to BREADBOARD_SERVER_URL.
            api_key: Board server API key. Defaults to BREADBOARD_API_KEY.
            timeout_s: HTTP timeout in seconds.

        Returns:
            A ClientConfig with the trailing slash removed from ``base_url``.

        Raises:
            ValueError: If a value is missing in both the argument and environment.
        """
        load_env()
        url = base_url or get_required_env_var(
            ENV_SERVER_URL,
            f"Server URL missing. Define {ENV_SERVER_URL} in environment or pass base_url value",
        )
        key = api_key or get_required_env_var(
            ENV_API_KEY,
            f"API key missing. Define {ENV_API_KEY} in environment or pass api_key value",
        )
        return ClientConfig(base_url=url.rstrip("/"), api_key=key, timeout_s=timeout_s)
