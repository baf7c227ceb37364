"""
hsl_decoder.single_ticket

Decoding of HSL single tickets: an application information area followed by
one value ticket. The application version decides the layout of both.
"""

import logging
from datetime import tzinfo
from typing import Optional

from common.models import ApplicationInfo, FormatVersion, SingleTicket

from .bits import read_bits
from .layouts import CardDataError, RecordLayout, get_layout
from .luhn import is_valid_luhn
from .value_ticket import decode_value_ticket

logger = logging.getLogger(__name__)

LEGACY_VERSION_BIT = 128  # high nibble of byte 16
REVISED_VERSION_BIT = 168  # high nibble of byte 21
REVISED_MIN_VERSION = 2


def detect_single_ticket_version(application_information: bytes) -> FormatVersion:
    """
    Revised tickets carry an application version of 2 or more in the high
    nibble of byte 21, and that field is read first. Byte 16 starts the
    revised instance id, so its high nibble only decides when byte 21 does
    not name a revised version: below 2 is legacy, anything else revised.

    Raises:
        CardDataError: buffer too short to hold the revised version field.
    """
    if len(application_information) <= REVISED_VERSION_BIT // 8:
        raise CardDataError(
            f"single ticket application information too short to read its version: "
            f"{len(application_information)} bytes"
        )
    if read_bits(application_information, REVISED_VERSION_BIT, 4) >= REVISED_MIN_VERSION:
        return FormatVersion.REVISED
    legacy_version = read_bits(application_information, LEGACY_VERSION_BIT, 4)
    if legacy_version < REVISED_MIN_VERSION:
        return FormatVersion.LEGACY
    return FormatVersion.REVISED


def _ticket_number(data: bytes, layout: RecordLayout, check_digit: int) -> str:
    # Seven decimal digits folded from the chip serial, then the check digit.
    serial = ((data[1] ^ data[5]) & 0x7F) << 16
    serial |= ((data[2] ^ data[6]) & 0xFF) << 8
    serial |= (data[4] ^ data[7]) & 0xFF
    return f"{layout.instance_id_hex(data)}{serial:07d}{check_digit}"


def decode_single_ticket(
    application_information: bytes,
    ticket: bytes,
    tz: Optional[tzinfo] = None,
) -> SingleTicket:
    """
    Decode a single ticket.

    Raises:
        CardDataError: either buffer shorter than its layout requires.
    """
    app_data = bytes(application_information)
    version = detect_single_ticket_version(app_data)
    layout = get_layout("single_ticket_info", version)
    layout.require(app_data)
    logger.debug(f"Single ticket detected as {version.value}")

    raw = layout.decode(app_data)
    ticket_number = _ticket_number(app_data, layout, raw["check_digit"])
    app_info = ApplicationInfo(
        application_version=raw["application_version"],
        application_key_version=raw["application_key_version"],
        application_instance_id=ticket_number,
        platform_type=raw["platform_type"],
        security_level=raw["security_level"],
        card_number_valid=is_valid_luhn(ticket_number),
    )
    return SingleTicket(
        format_version=version,
        application_info=app_info,
        value_ticket=decode_value_ticket(ticket, version, single_ticket=True, tz=tz),
    )
