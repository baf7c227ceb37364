"""
Defines FastAPI APIRouter for decoding travel cards and single tickets.

Decoding is CPU-bound and synchronous, so the path operations are plain
functions that FastAPI runs in its threadpool.
"""

import logging

from fastapi import APIRouter

from card_daemon.card_processing import process_single_ticket, process_travel_card
from card_daemon.config import get_decoder_config
from card_daemon.models import SingleTicketRequest, TravelCardRequest
from common.models import SingleTicket, TravelCard

logger = logging.getLogger(__name__)

api_router_cards = APIRouter()


@api_router_cards.post("/travel-card", response_model=TravelCard)
def decode_travel_card_api(request: TravelCardRequest):
    """
    Decodes travel card files. Short files give a TravelCard with
    error_status DATA_FAILURE (2) rather than an HTTP error.
    """
    return process_travel_card(request, get_decoder_config())


@api_router_cards.post("/single-ticket", response_model=SingleTicket)
def decode_single_ticket_api(request: SingleTicketRequest):
    """Decodes a single ticket. Short areas are rejected with HTTP 422."""
    return process_single_ticket(request, get_decoder_config())
