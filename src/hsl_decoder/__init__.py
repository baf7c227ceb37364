"""
hsl_decoder
===========

Library for decoding HSL travel cards and single tickets.

This package turns the raw files read from a card into immutable models.
Field positions live in declarative record layouts (config/layouts.yml); a
single bit-field primitive reads them and the EN1545 codec converts the
card's day and minute counts into timezone-aware datetimes.

Functions:
    - read_bits: Extract an MSB-first bitfield from a card file
    - decode_travel_card: Decode the travel card files into a TravelCard
    - decode_single_ticket: Decode a single ticket into a SingleTicket
    - detect_single_ticket_version: Legacy or revised single ticket
    - decode_value_ticket: Decode one value ticket
    - decode_history: Decode the History file
    - load_layouts / get_layout: Access the record layouts
"""

from .bits import read_bits
from .history import decode_history
from .layouts import CardDataError, RecordLayout, get_layout, load_layouts
from .single_ticket import decode_single_ticket, detect_single_ticket_version
from .travel_card import decode_travel_card, error_travel_card
from .value_ticket import decode_value_ticket

__all__ = [
    "CardDataError",
    "RecordLayout",
    "decode_history",
    "decode_single_ticket",
    "decode_travel_card",
    "decode_value_ticket",
    "detect_single_ticket_version",
    "error_travel_card",
    "get_layout",
    "load_layouts",
    "read_bits",
]
