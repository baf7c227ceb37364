"""
card_daemon

HTTP service for hslcard2api: a FastAPI backend that decodes HSL travel cards
and single tickets posted as hex-encoded card files.

Modules:
    - card_processing: Runs the decoder for API requests and records metrics
    - config: Application configuration and environment setup
    - main: FastAPI application setup and server entry point
    - metrics: Prometheus metrics
    - middleware: HTTP metrics middleware
    - models: Pydantic models for API request validation
"""

from ._version import VERSION
from .config import configure_logger, get_decoder_config, get_layout_path
from .main import app, create_app

__all__ = [
    "VERSION",
    "app",
    "create_app",
    "configure_logger",
    "get_decoder_config",
    "get_layout_path",
]
