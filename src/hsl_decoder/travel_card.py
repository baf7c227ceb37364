"""
hsl_decoder.travel_card

Decoding of the HSL travel card files into a TravelCard aggregate.

Every file is checked against the minimum length of its layout before any
field is read. A failed check yields an error-only TravelCard with
DATA_FAILURE; nothing is partially decoded.

Functions:
    - decode_travel_card: Decodes all travel card files for one format version
    - error_travel_card: Error-only TravelCard for failures outside the decoder
"""

import logging
from datetime import tzinfo
from typing import Dict, Mapping, Optional

from common.models import (
    ApplicationInfo,
    ErrorStatus,
    FormatVersion,
    PeriodLoadEvent,
    PeriodPassSlot,
    StoredValueBalance,
    TravelCard,
)

from .en1545 import decode_date, decode_datetime, decode_end_of_day, is_sentinel
from .history import HISTORY_MAX_LENGTH, decode_history
from .layouts import RecordLayout, get_layout
from .luhn import is_valid_luhn
from .value_ticket import boarding_event, decode_value_ticket, ticket_layout

logger = logging.getLogger(__name__)


def error_travel_card(status: ErrorStatus) -> TravelCard:
    """TravelCard carrying only an error status, e.g. NO_CARD or READ_FAILURE from the reader."""
    return TravelCard.from_error(ErrorStatus(status))


def _required_layouts(version: FormatVersion) -> Dict[str, RecordLayout]:
    layouts = {
        "application_information": get_layout("application_info", version),
        "period_pass": get_layout("period_pass", version),
        "stored_value": get_layout("stored_value", version),
        "ticket": ticket_layout(version),
    }
    if version == FormatVersion.REVISED:
        layouts["control_information"] = get_layout("control_info", version)
    return layouts


def _application_info(data: bytes, layout: RecordLayout) -> ApplicationInfo:
    raw = layout.decode(data)
    instance_id = layout.instance_id_hex(data)
    return ApplicationInfo(
        application_version=raw["application_version"],
        application_key_version=raw["application_key_version"],
        application_instance_id=instance_id,
        platform_type=raw["platform_type"],
        security_level=raw["security_level"],
        card_number_valid=is_valid_luhn(instance_id),
    )


def _period_pass_slot(raw: Mapping[str, int], slot: int, tz: Optional[tzinfo]) -> PeriodPassSlot:
    start_day = raw[f"start_date_{slot}"]
    end_day = raw[f"end_date_{slot}"]
    start_date = decode_date(start_day, tz)
    return PeriodPassSlot(
        product_code=raw[f"product_code_{slot}"],
        product_code_type=raw.get(f"product_code_type_{slot}"),
        validity_area_type=raw[f"validity_area_type_{slot}"],
        validity_area=raw[f"validity_area_{slot}"],
        start_date=start_date,
        end_date=decode_end_of_day(end_day, tz),
        length_days=end_day - start_day + 1,
        in_use=not is_sentinel(start_date),
    )


def _last_load(raw: Mapping[str, int], tz: Optional[tzinfo]) -> PeriodLoadEvent:
    return PeriodLoadEvent(
        product_code=raw["load_product_code"],
        product_code_type=raw.get("load_product_code_type"),
        loading_date=decode_datetime(raw["load_date"], raw["load_time"], tz),
        loaded_length=raw["loaded_length"],
        loaded_price=raw["loaded_price"],
        loading_organisation=raw["loading_organisation"],
        loading_device=raw["loading_device"],
    )


def _stored_value(raw: Mapping[str, int], tz: Optional[tzinfo]) -> StoredValueBalance:
    if "loading_date" not in raw:
        return StoredValueBalance(balance=raw["balance"])
    return StoredValueBalance(
        balance=raw["balance"],
        loading_date=decode_datetime(raw["loading_date"], raw["loading_time"], tz),
        loading_time=raw["loading_time"],
        loaded_value=raw["loaded_value"],
        loading_organisation=raw["loading_organisation"],
        loading_device=raw["loading_device"],
    )


def decode_travel_card(
    version: FormatVersion,
    *,
    application_information: bytes,
    period_pass: bytes,
    stored_value: bytes,
    ticket: bytes,
    history: Optional[bytes] = None,
    control_information: Optional[bytes] = None,
    tz: Optional[tzinfo] = None,
    check_card_number: bool = False,
) -> TravelCard:
    """
    Decode the files of an HSL travel card.

    Args:
        version: Format version the files were read as.
        application_information: ApplicationInformation file.
        period_pass: PeriodPass file.
        stored_value: StoredValue file.
        ticket: eTicket file.
        history: History file; missing or short files give fewer entries.
        control_information: ControlInformation file, required on revised cards.
        tz: Zone the card's local times are in; system local when omitted.
        check_card_number: Return CARD_NUMBER_FAILURE when the card number
            fails the Luhn check.

    Returns:
        TravelCard. When error_status is not OK no other field is set.
    """
    version = FormatVersion(version)
    files = {
        "application_information": application_information,
        "period_pass": period_pass,
        "stored_value": stored_value,
        "ticket": ticket,
        "control_information": control_information,
    }
    layouts = _required_layouts(version)

    # Copy every buffer so the caller may reuse its own.
    data: Dict[str, bytes] = {}
    for name, layout in layouts.items():
        buffer = files[name]
        if buffer is None or not layout.fits(buffer):
            logger.warning(
                f"Travel card file '{name}' too short for {version.value} layout: "
                f"{0 if buffer is None else len(buffer)} < {layout.min_length} bytes"
            )
            return TravelCard.from_error(ErrorStatus.DATA_FAILURE)
        data[name] = bytes(buffer)

    history_data = bytes(history or b"")[:HISTORY_MAX_LENGTH]

    app_info = _application_info(data["application_information"], layouts["application_information"])
    if check_card_number and not app_info.card_number_valid:
        logger.warning(f"Card number {app_info.application_instance_id} failed the Luhn check")
        return TravelCard.from_error(ErrorStatus.CARD_NUMBER_FAILURE)

    app_status = None
    if "control_information" in layouts:
        app_status = layouts["control_information"].decode(data["control_information"])["app_status"]

    pass_raw = layouts["period_pass"].decode(data["period_pass"])

    return TravelCard(
        error_status=ErrorStatus.OK,
        format_version=version,
        application_info=app_info,
        app_status=app_status,
        period_pass_1=_period_pass_slot(pass_raw, 1, tz),
        period_pass_2=_period_pass_slot(pass_raw, 2, tz),
        last_load=_last_load(pass_raw, tz),
        last_boarding=boarding_event(pass_raw, tz),
        stored_value=_stored_value(layouts["stored_value"].decode(data["stored_value"]), tz),
        value_ticket=decode_value_ticket(data["ticket"], version, single_ticket=False, tz=tz),
        history=decode_history(history_data, version, tz),
    )
