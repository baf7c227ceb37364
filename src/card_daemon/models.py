"""
Defines Pydantic models for API request validation.

Card files travel as hex strings in JSON bodies; the validators below turn
them into bytes, so an invalid hex string is rejected with HTTP 422 before
any decoding happens. Responses reuse the decoded models from common.models.

Models:
    - TravelCardRequest: Travel card files plus their format version
    - SingleTicketRequest: Single ticket application info and ticket area
    - ServerStatus: Basic server status
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from common.models import ErrorStatus, FormatVersion


def _hex_to_bytes(value):
    if value is None or isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise ValueError("card file must be a hex string")
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ValueError("card file is not a valid hex string") from None


class TravelCardRequest(BaseModel):
    """Raw travel card files as read from the card."""

    format_version: FormatVersion
    application_information: bytes = Field(..., description="ApplicationInformation file, hex")
    control_information: Optional[bytes] = Field(
        None, description="ControlInformation file, hex. Required for revised cards."
    )
    period_pass: bytes = Field(..., description="PeriodPass file, hex")
    stored_value: bytes = Field(..., description="StoredValue file, hex")
    ticket: bytes = Field(..., description="eTicket file, hex")
    history: Optional[bytes] = Field(None, description="History file, hex")
    error_status: Optional[ErrorStatus] = Field(
        None,
        description="Status reported by the card reader. Anything but OK is returned as is.",
    )

    @field_validator(
        "application_information",
        "control_information",
        "period_pass",
        "stored_value",
        "ticket",
        "history",
        mode="before",
    )
    @classmethod
    def decode_hex(cls, value):
        return _hex_to_bytes(value)


class SingleTicketRequest(BaseModel):
    """Raw single ticket areas as read from the ticket."""

    application_information: bytes = Field(..., description="Application information area, hex")
    ticket: bytes = Field(..., description="Value ticket area, hex")

    @field_validator("application_information", "ticket", mode="before")
    @classmethod
    def decode_hex(cls, value):
        return _hex_to_bytes(value)


class ServerStatus(BaseModel):
    status: str
    version: str
    server_start_time_unix: float
    uptime_seconds: float
    layout_path: str
    layout_count: int
