"""
common

This package contains the shared models used across the hslcard2api project.

Modules:
    - models: Pydantic models for decoded travel cards and single tickets
"""

from .models import (
    ApplicationInfo,
    BoardingEvent,
    ErrorStatus,
    ExtraZone,
    FormatVersion,
    HistoryEntry,
    PeriodLoadEvent,
    PeriodPassSlot,
    SingleTicket,
    StoredValueBalance,
    TransactionType,
    TravelCard,
    ValueTicket,
)

__all__ = [
    "ApplicationInfo",
    "BoardingEvent",
    "ErrorStatus",
    "ExtraZone",
    "FormatVersion",
    "HistoryEntry",
    "PeriodLoadEvent",
    "PeriodPassSlot",
    "SingleTicket",
    "StoredValueBalance",
    "TransactionType",
    "TravelCard",
    "ValueTicket",
]
