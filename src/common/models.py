"""
common.models

Shared Pydantic models for decoded HSL card data, used by both the decoder
library and the API daemon.

All records are frozen: a decode call builds each aggregate once and nothing
mutates it afterwards.

FormatVersion / ErrorStatus / TransactionType:
    Enumerations for the card specification generation, the travel card read
    status and the history transaction kind.

ApplicationInfo, PeriodPassSlot, PeriodLoadEvent, BoardingEvent,
StoredValueBalance, HistoryEntry, ExtraZone, ValueTicket:
    Sub-records of a travel card or single ticket.

TravelCard / SingleTicket:
    The top-level aggregates returned by the decoders.
"""

from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class FormatVersion(str, Enum):
    """On-card data specification generation."""

    LEGACY = "legacy"
    REVISED = "revised"


class ErrorStatus(IntEnum):
    """Read/decode status of a travel card. Values match the card library's status codes."""

    OK = 0
    NO_CARD = 1
    DATA_FAILURE = 2
    READ_FAILURE = 3
    CARD_NUMBER_FAILURE = 4


class TransactionType(IntEnum):
    """History entry kind: journey on a period pass or on a value ticket."""

    SEASON_PASS = 0
    VALUE_TICKET = 1


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ApplicationInfo(FrozenModel):
    """
    ApplicationInfo

    Card application header from the ApplicationInformation file.

    Attributes:
        application_version (int): Version nibble kept in place (e.g. 0x20).
        application_key_version (int): Key version nibble.
        application_instance_id (str): Card or ticket number.
        platform_type (int): Platform type bits kept in place.
        security_level (int): Security level bit kept in place.
        card_number_valid (bool): application_instance_id passes the Luhn check.
    """

    application_version: int
    application_key_version: int
    application_instance_id: str
    platform_type: int
    security_level: int
    card_number_valid: bool


class PeriodPassSlot(FrozenModel):
    """
    PeriodPassSlot

    One of the two season (period) products a travel card can hold.

    Attributes:
        product_code (int): Product code of the period pass.
        product_code_type (Optional[int]): Product code type, revised cards only.
        validity_area_type (int): 0 = zone, 1 = vehicle type (legacy); 2 bits on revised.
        validity_area (int): Zone or vehicle code.
        start_date (datetime): First day of validity, local midnight.
        end_date (datetime): Last day of validity, 23:59:59 local.
        length_days (int): end - start + 1, in days.
        in_use (bool): False for a zero-filled slot, whose start date is the 1997 epoch.
    """

    product_code: int
    product_code_type: Optional[int] = None
    validity_area_type: int
    validity_area: int
    start_date: datetime
    end_date: datetime
    length_days: int
    in_use: bool


class PeriodLoadEvent(FrozenModel):
    """Last period pass loading."""

    product_code: int
    product_code_type: Optional[int] = None
    loading_date: datetime
    loaded_length: int
    loaded_price: int
    loading_organisation: int
    loading_device: int


class BoardingEvent(FrozenModel):
    """Last boarding (validation) made with a period pass or value ticket."""

    boarding_date: datetime
    vehicle: int
    location_number_type: int
    location_number: int
    direction: int
    area: int
    area_type: Optional[int] = None


class StoredValueBalance(FrozenModel):
    """
    StoredValueBalance

    Attributes:
        balance (int): Stored value in cents.
        loading_date (Optional[datetime]): Last value loading, legacy cards only.
        loading_time (Optional[int]): Raw minutes of the last loading, legacy cards only.
        loaded_value (Optional[int]): Amount of the last loading in cents, legacy cards only.
        loading_organisation (Optional[int]): Legacy cards only.
        loading_device (Optional[int]): Legacy cards only.
    """

    balance: int
    loading_date: Optional[datetime] = None
    loading_time: Optional[int] = None
    loaded_value: Optional[int] = None
    loading_organisation: Optional[int] = None
    loading_device: Optional[int] = None


class HistoryEntry(FrozenModel):
    """One journey from the History file."""

    transaction_type: TransactionType
    boarding_date: datetime
    transfer_end_date: Optional[datetime] = None
    group_size: int
    price: int


class ExtraZone(FrozenModel):
    """Extra zone extension of a revised value ticket bought on top of a period pass."""

    extra_zone: bool
    period_pass_validity_area: int
    product_code: int
    first_area: int
    first_fare: int
    second_area: int
    second_fare: int


class ValueTicket(FrozenModel):
    """
    ValueTicket

    A value ticket from a travel card's eTicket file or a single ticket.
    Fields that the card stores separately for the individual ticket and for
    the additional group members are already merged.

    Attributes:
        product_code (int): Group product code when set, else the individual one.
        child (bool): Child ticket.
        language_code (int): Ticket language.
        validity_length_type (int): 0 = minutes, 1 = hours, 2 = 24h periods, 3 = days.
        validity_length (int): Validity length in validity_length_type units.
        validity_area_type (int): Zone or vehicle type.
        validity_area (int): Zone or vehicle code.
        sale_date (datetime): Sale date and time.
        sale_time (int): Raw sale time (hours on legacy tickets, minutes on revised).
        sale_status (int): Sale status bit.
        group_size (int): Number of travellers.
        ticket_fare (int): Individual fare, else group fare, in cents.
        group_fare (int): Fare per additional group member, in cents.
        right_fare (int): Fare for the whole group without extension fares.
        total_fare (int): right_fare plus extension fares.
        validity_start_date (datetime): Start of validity.
        validity_end_date (datetime): End of validity; the group end overrides when set.
        validity_status (int): Validity status bit.
        boarding (BoardingEvent): Last boarding made with the ticket.
        extra_zone (Optional[ExtraZone]): Revised travel card tickets only.
        unused (bool): No end date yet, so the ticket has not been taken into use.
    """

    product_code: int
    child: bool
    language_code: int
    validity_length_type: int
    validity_length: int
    validity_area_type: int
    validity_area: int
    sale_date: datetime
    sale_time: int
    sale_status: int
    group_size: int
    ticket_fare: int = 0
    group_fare: int = 0
    right_fare: int = 0
    total_fare: int = 0
    validity_start_date: datetime
    validity_end_date: datetime
    validity_status: int
    boarding: BoardingEvent
    extra_zone: Optional[ExtraZone] = None
    unused: bool


class TravelCard(FrozenModel):
    """
    TravelCard

    Everything decoded from an HSL travel card. When error_status is not OK
    every other field is None and must not be read.
    """

    error_status: ErrorStatus = ErrorStatus.OK
    format_version: Optional[FormatVersion] = None
    application_info: Optional[ApplicationInfo] = None
    app_status: Optional[int] = None
    period_pass_1: Optional[PeriodPassSlot] = None
    period_pass_2: Optional[PeriodPassSlot] = None
    last_load: Optional[PeriodLoadEvent] = None
    last_boarding: Optional[BoardingEvent] = None
    stored_value: Optional[StoredValueBalance] = None
    value_ticket: Optional[ValueTicket] = None
    history: Tuple[HistoryEntry, ...] = ()

    @classmethod
    def from_error(cls, error_status: ErrorStatus) -> "TravelCard":
        return cls(error_status=error_status)

    @property
    def ok(self) -> bool:
        return self.error_status == ErrorStatus.OK


class SingleTicket(FrozenModel):
    """Everything decoded from an HSL single ticket."""

    format_version: FormatVersion
    application_info: ApplicationInfo
    value_ticket: ValueTicket
