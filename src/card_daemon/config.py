"""
Handles application configuration for the hslcard2api daemon.

This module is responsible for:
- Configuring logging for the application.
- Determining the layout file the decoder uses, considering the
  HSL_LAYOUT_PATH override and the bundled default.
- Providing FastAPI application settings (title, description, root_path).
- Providing decoder settings (card timezone, card number validation).
"""

import logging
import os
from datetime import tzinfo
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import coloredlogs

from hsl_decoder.layouts import default_layouts

# ── Logging Configuration ──────────────────────────────────────────────────
module_logger = logging.getLogger(__name__)

# Resolved once by get_decoder_config().
DECODER_CONFIG: Optional[Dict[str, Any]] = None

_TRUE_VALUES = ("1", "true", "yes", "on")


def configure_logger():
    root_logger = logging.getLogger()
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()

    log_level_int = getattr(logging, log_level_str, None)
    if not isinstance(log_level_int, int):
        module_logger.warning(f"Invalid LOG_LEVEL '{log_level_str}'. Defaulting to INFO.")
        log_level_int = logging.INFO

    log_format = "%(asctime)s %(name)s[%(process)d] %(levelname)s %(message)s"

    # Handlers filter by their own level; the root logger passes everything.
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    coloredlogs.install(
        level=log_level_int,
        fmt=log_format,
        logger=root_logger,
        reconfigure=True,
    )

    return root_logger


# ── Layout file ────────────────────────────────────────────────────────────
def get_layout_path() -> str:
    """
    Determines the layout file the decoder loads.

    HSL_LAYOUT_PATH wins when it names a readable file; otherwise the layouts.yml
    bundled with hsl_decoder is used. The choice is made once, when
    hsl_decoder.layouts.default_layouts() loads the file, so the service and
    the decoder always agree on it.

    Returns:
        str: Path of the layout file.
    """
    return default_layouts().path


# ── FastAPI Configuration ──────────────────────────────────────────────────
def get_fastapi_config():
    """
    Retrieves FastAPI application settings from environment variables.

    Returns:
        dict: A dictionary containing title, server_description, and root_path
              for the FastAPI application.
    """
    return {
        "title": os.getenv("HSLCARD2API_TITLE", "hslcard2api"),
        "server_description": os.getenv(
            "HSLCARD2API_SERVER_DESCRIPTION", "HSL travel card and ticket decoder"
        ),
        "root_path": os.getenv("HSLCARD2API_ROOT_PATH", ""),
    }


# ── Decoder Configuration ──────────────────────────────────────────────────
def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Turns an IANA zone name into a tzinfo.

    Returns None (system local zone) when no name is given or the name is
    unknown; the latter is logged as a warning.
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        module_logger.warning(f"Unknown HSL_TIMEZONE '{name}'. Using the system local timezone.")
        return None


def get_decoder_config() -> Dict[str, Any]:
    """
    Retrieves decoder settings from environment variables.

    Returns:
        dict: A dictionary containing:
              - 'timezone': tzinfo the card's local times are in (None = system local).
              - 'validate_card_number': Reject travel cards failing the Luhn check.
    """
    global DECODER_CONFIG

    if DECODER_CONFIG is None:
        DECODER_CONFIG = {
            "timezone": resolve_timezone(os.getenv("HSL_TIMEZONE")),
            "validate_card_number": os.getenv("HSL_VALIDATE_CARD_NUMBER", "false").lower()
            in _TRUE_VALUES,
        }
    return DECODER_CONFIG
