"""
api_routers

This package contains FastAPI APIRouter modules that define the API endpoints
for the hslcard2api application.

Routers:
    - cards: Endpoints decoding travel cards and single tickets
    - status: Health, metrics, server status and layout endpoints
"""

from .cards import api_router_cards
from .status import api_router_status

__all__ = ["api_router_cards", "api_router_status"]
