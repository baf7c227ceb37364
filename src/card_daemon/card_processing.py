"""
Handles the processing of decode requests for the hslcard2api daemon.

This module is responsible for:
- Passing request buffers to the hsl_decoder.
- Passing reader-side error statuses through without decoding.
- Recording decode metrics and logging failures.
"""

import logging
import time
from typing import Any, Dict

from card_daemon.metrics import (
    CARD_STATUS_COUNTER,
    DECODE_ERRORS,
    DECODE_LATENCY,
    DECODE_REQUESTS,
    SUCCESSFUL_DECODES,
)
from card_daemon.models import SingleTicketRequest, TravelCardRequest
from common.models import ErrorStatus, SingleTicket, TravelCard
from hsl_decoder import CardDataError, decode_single_ticket, decode_travel_card, error_travel_card

logger = logging.getLogger(__name__)


def process_travel_card(request: TravelCardRequest, decoder_config: Dict[str, Any]) -> TravelCard:
    DECODE_REQUESTS.labels(kind="travel_card").inc()

    if request.error_status is not None and request.error_status != ErrorStatus.OK:
        logger.info(f"Card reader reported {request.error_status.name}; not decoding")
        CARD_STATUS_COUNTER.labels(status=request.error_status.name).inc()
        return error_travel_card(request.error_status)

    start_time = time.perf_counter()
    try:
        card = decode_travel_card(
            request.format_version,
            application_information=request.application_information,
            control_information=request.control_information,
            period_pass=request.period_pass,
            stored_value=request.stored_value,
            ticket=request.ticket,
            history=request.history,
            tz=decoder_config["timezone"],
            check_card_number=decoder_config["validate_card_number"],
        )
    except Exception as e:
        DECODE_ERRORS.labels(kind="travel_card").inc()
        logger.error(f"Travel card decode failed: {e}", exc_info=True)
        raise
    finally:
        DECODE_LATENCY.labels(kind="travel_card").observe(time.perf_counter() - start_time)

    CARD_STATUS_COUNTER.labels(status=card.error_status.name).inc()
    if card.ok:
        SUCCESSFUL_DECODES.labels(kind="travel_card").inc()
    return card


def process_single_ticket(request: SingleTicketRequest, decoder_config: Dict[str, Any]) -> SingleTicket:
    DECODE_REQUESTS.labels(kind="single_ticket").inc()

    start_time = time.perf_counter()
    try:
        ticket = decode_single_ticket(
            request.application_information,
            request.ticket,
            tz=decoder_config["timezone"],
        )
    except CardDataError as e:
        DECODE_ERRORS.labels(kind="single_ticket").inc()
        logger.warning(f"Single ticket rejected: {e}")
        raise
    except Exception as e:
        DECODE_ERRORS.labels(kind="single_ticket").inc()
        logger.error(f"Single ticket decode failed: {e}", exc_info=True)
        raise
    finally:
        DECODE_LATENCY.labels(kind="single_ticket").observe(time.perf_counter() - start_time)

    SUCCESSFUL_DECODES.labels(kind="single_ticket").inc()
    return ticket
