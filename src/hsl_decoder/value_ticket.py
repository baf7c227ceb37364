"""
hsl_decoder.value_ticket

Decoding of value tickets, stored either in a travel card's eTicket file or on
a single ticket.

Three layout variants exist: legacy (shared by both carriers, with seal bytes
on single tickets), revised travel card and revised single ticket. The revised
travel card file keeps an individual ticket, an optional "per additional group
member" ticket and an extra zone extension side by side; merge_fares() folds
them into the fields of one ValueTicket.

Functions:
    - ticket_layout: Selects the layout variant for a version and carrier
    - merge_fares: Derives the merged product, validity and fare fields
    - boarding_event: Builds a BoardingEvent from boarding_* fields
    - decode_value_ticket: Decodes a ticket buffer into a ValueTicket
"""

import logging
from datetime import tzinfo
from typing import Any, Dict, Mapping, Optional

from common.models import BoardingEvent, ExtraZone, FormatVersion, ValueTicket

from .en1545 import decode_datetime, is_sentinel
from .layouts import RecordLayout, get_layout

logger = logging.getLogger(__name__)


def ticket_layout(version: FormatVersion, single_ticket: bool = False) -> RecordLayout:
    if FormatVersion(version) == FormatVersion.LEGACY:
        layout = get_layout("value_ticket", FormatVersion.LEGACY)
        return layout.with_seals() if single_ticket else layout
    if single_ticket:
        return get_layout("single_value_ticket", FormatVersion.REVISED)
    return get_layout("value_ticket", FormatVersion.REVISED)


def merge_fares(raw: Mapping[str, int]) -> Dict[str, Any]:
    """
    Merge the individual and group parts of a decoded ticket.

    Fields a layout lacks (legacy tickets have no fares or group part, single
    tickets no group part or extension) count as zero.

    Returns:
        dict with product_code, validity_length_type, validity_length,
        ticket_fare, use_group_end_date, right_fare and total_fare.
    """
    individual_fare = raw.get("ticket_fare", 0)
    group_fare = raw.get("group_fare", 0)
    group_size = raw.get("group_size", 0)
    extra_zone = bool(raw.get("extra_zone", 0))

    if raw.get("group_validity_length_type", 0):
        length_type = raw["group_validity_length_type"]
        length = raw["group_validity_length"]
    else:
        length_type = raw["validity_length_type"]
        length = raw["validity_length"]

    # The individual fare already pays for the first group member.
    right_fare = individual_fare
    if (extra_zone or individual_fare > 0) and group_size > 1:
        right_fare += (group_size - 1) * group_fare

    total_fare = right_fare
    if extra_zone:
        total_fare += raw.get("extension_1_fare", 0) + raw.get("extension_2_fare", 0)

    return {
        "product_code": raw.get("group_product_code", 0) or raw["product_code"],
        "validity_length_type": length_type,
        "validity_length": length,
        "ticket_fare": individual_fare or group_fare,
        "use_group_end_date": bool(
            raw.get("group_validity_end_date", 0) and raw.get("group_validity_end_time", 0)
        ),
        "right_fare": right_fare,
        "total_fare": total_fare,
    }


def boarding_event(raw: Mapping[str, int], tz: Optional[tzinfo]) -> BoardingEvent:
    return BoardingEvent(
        boarding_date=decode_datetime(raw["boarding_date"], raw["boarding_time"], tz),
        vehicle=raw["boarding_vehicle"],
        location_number_type=raw["boarding_location_number_type"],
        location_number=raw["boarding_location_number"],
        direction=raw["boarding_direction"],
        area=raw["boarding_area"],
        area_type=raw.get("boarding_area_type"),
    )


def _extra_zone(raw: Mapping[str, int]) -> Optional[ExtraZone]:
    if "extra_zone" not in raw:
        return None
    return ExtraZone(
        extra_zone=bool(raw["extra_zone"]),
        period_pass_validity_area=raw["period_pass_validity_area"],
        product_code=raw["extension_product_code"],
        first_area=raw["extension_1_validity_area"],
        first_fare=raw["extension_1_fare"],
        second_area=raw["extension_2_validity_area"],
        second_fare=raw["extension_2_fare"],
    )


def decode_value_ticket(
    buffer: bytes,
    version: FormatVersion,
    single_ticket: bool = False,
    tz: Optional[tzinfo] = None,
) -> ValueTicket:
    """
    Decode a value ticket.

    Args:
        buffer: eTicket file of a travel card, or the ticket area of a single ticket.
        version: Format version of the card.
        single_ticket: True when the buffer comes from a single ticket.
        tz: Zone the card's local times are in; system local when omitted.

    Raises:
        CardDataError: buffer shorter than the selected layout needs.
    """
    layout = ticket_layout(version, single_ticket)
    data = bytes(buffer)
    layout.require(data)
    logger.debug(f"Decoding value ticket with layout {layout.record}/{layout.version.value}")

    raw = layout.decode(data)
    merged = merge_fares(raw)

    if layout.version == FormatVersion.LEGACY:
        # Legacy tickets store the sale hour, not minutes.
        sale_date = decode_datetime(raw["sale_date"], raw["sale_time"] * 60, tz)
    else:
        sale_date = decode_datetime(raw["sale_date"], raw["sale_time"], tz)

    if merged["use_group_end_date"]:
        end_date = decode_datetime(raw["group_validity_end_date"], raw["group_validity_end_time"], tz)
    else:
        end_date = decode_datetime(raw["validity_end_date"], raw["validity_end_time"], tz)

    return ValueTicket(
        product_code=merged["product_code"],
        child=bool(raw["child"]),
        language_code=raw["language_code"],
        validity_length_type=merged["validity_length_type"],
        validity_length=merged["validity_length"],
        validity_area_type=raw["validity_area_type"],
        validity_area=raw["validity_area"],
        sale_date=sale_date,
        sale_time=raw["sale_time"],
        sale_status=raw["sale_status"],
        group_size=raw["group_size"],
        ticket_fare=merged["ticket_fare"],
        group_fare=raw.get("group_fare", 0),
        right_fare=merged["right_fare"],
        total_fare=merged["total_fare"],
        validity_start_date=decode_datetime(raw["validity_start_date"], raw["validity_start_time"], tz),
        validity_end_date=end_date,
        validity_status=raw["validity_status"],
        boarding=boarding_event(raw, tz),
        extra_zone=_extra_zone(raw),
        unused=is_sentinel(end_date),
    )
