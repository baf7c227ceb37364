"""
hsl_decoder.history

Decoding of the travel card History file: up to eight fixed-size journey
entries, oldest first.
"""

import logging
from datetime import tzinfo
from typing import List, Optional, Tuple

from common.models import FormatVersion, HistoryEntry, TransactionType

from .en1545 import decode_datetime
from .layouts import get_layout

logger = logging.getLogger(__name__)

ENTRY_LENGTH = 12
MAX_ENTRIES = 8
HISTORY_MAX_LENGTH = ENTRY_LENGTH * MAX_ENTRIES


def entry_present(entry: bytes) -> bool:
    """Unused slots are zero-filled; bytes 1..4 hold the entry's date and time."""
    return any(entry[1:5])


def decode_history_entry(entry: bytes, version: FormatVersion, tz: Optional[tzinfo] = None) -> HistoryEntry:
    raw = get_layout("history_entry", version).decode(entry)

    if FormatVersion(version) == FormatVersion.LEGACY:
        # Only the transfer end date is stored; step back a day when the
        # transfer ended after midnight.
        boarding_day = raw["transfer_end_date"]
        if raw["transfer_end_time"] < raw["boarding_time"]:
            boarding_day -= 1
        boarding_date = decode_datetime(boarding_day, raw["boarding_time"], tz)
        transfer_end_date = None
    else:
        boarding_date = decode_datetime(raw["boarding_date"], raw["boarding_time"], tz)
        transfer_end_date = decode_datetime(raw["transfer_end_date"], raw["transfer_end_time"], tz)

    return HistoryEntry(
        transaction_type=TransactionType(raw["transaction_type"]),
        boarding_date=boarding_date,
        transfer_end_date=transfer_end_date,
        group_size=raw["group_size"],
        price=raw["price"],
    )


def decode_history(buffer: bytes, version: FormatVersion, tz: Optional[tzinfo] = None) -> Tuple[HistoryEntry, ...]:
    """
    Decode every present entry of a History file in buffer order.

    Trailing bytes that do not make up a whole entry are ignored, as is
    anything past the eighth entry.
    """
    data = bytes(buffer)
    count = min(len(data) // ENTRY_LENGTH, MAX_ENTRIES)
    entries: List[HistoryEntry] = []
    for index in range(count):
        entry = data[index * ENTRY_LENGTH : (index + 1) * ENTRY_LENGTH]
        if entry_present(entry):
            entries.append(decode_history_entry(entry, version, tz))

    logger.debug(f"Decoded {len(entries)} of {count} history slots")
    return tuple(entries)
