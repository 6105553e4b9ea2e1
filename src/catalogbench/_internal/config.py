"""Service configuration loading for catalogbench."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from catalogbench._internal.errors import ConfigError

DEFAULT_MONGODB_URI = "mongodb://localhost:27017/ecommerce"
DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"  # noqa: S104

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ServiceSettings:
    """Runtime settings for the product catalog service.

    Attributes:
        mongodb_uri: Document store connection string. ``memory://`` selects
            the in-process store.
        host: Interface to bind.
        port: TCP port to listen on.
        log_level: Logging level for the ``catalogbench`` logger.
        log_json: Emit structured JSON logs instead of plain text.
    """

    mongodb_uri: str = DEFAULT_MONGODB_URI
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: int = logging.INFO
    log_json: bool = False


def load_settings(*, use_dotenv: bool = True) -> ServiceSettings:
    """Load service settings from environment variables with defaults.

    Environment variables:
        MONGODB_URI: Store connection string
            (default: ``mongodb://localhost:27017/ecommerce``).
        PORT: Listening port (default: 3000).
        HOST: Bind address (default: 0.0.0.0).
        CATALOGBENCH_LOG_LEVEL: Logging level name (default: INFO).
        CATALOGBENCH_LOG_JSON: ``1``/``true`` for JSON logs.

    Args:
        use_dotenv: Read a ``.env`` file from the working directory first.
            Variables already present in the environment take precedence.

    Returns:
        Populated ServiceSettings instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    port_str = os.environ.get("PORT", str(DEFAULT_PORT))
    try:
        port = int(port_str)
    except ValueError:
        msg = f"PORT must be an integer, got: {port_str!r}"
        raise ConfigError(msg) from None

    if not 0 <= port <= 65535:
        msg = f"PORT must be between 0 and 65535, got: {port}"
        raise ConfigError(msg)

    level_name = os.environ.get("CATALOGBENCH_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        msg = f"CATALOGBENCH_LOG_LEVEL is not a logging level: {level_name!r}"
        raise ConfigError(msg)

    uri = os.environ.get("MONGODB_URI", DEFAULT_MONGODB_URI).strip()
    if not uri:
        msg = "MONGODB_URI must not be empty"
        raise ConfigError(msg)

    return ServiceSettings(
        mongodb_uri=uri,
        host=os.environ.get("HOST", DEFAULT_HOST),
        port=port,
        log_level=level,
        log_json=os.environ.get("CATALOGBENCH_LOG_JSON", "").lower() in _TRUTHY,
    )
