"""
Tests for hsl_decoder.travel_card.

Legacy files are built from the bit positions of the legacy card format
directly, so these tests also pin the legacy layouts in layouts.yml.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from common.models import ErrorStatus, FormatVersion, TransactionType
from hsl_decoder.travel_card import decode_travel_card, error_travel_card

UTC = timezone.utc
DAY_2024_01_01 = 9861

VALID_CARD_NUMBER = "924621001234567897"
INVALID_CARD_NUMBER = "924621001234567890"


def _app_info(card_number=VALID_CARD_NUMBER, first_byte=0x21):
    return bytes([first_byte]) + bytes.fromhex(card_number) + b"\xb0"


@pytest.fixture
def legacy_files(pack):
    period_pass = pack(
        32,
        [
            (0, 14, 1234),  # product code 1
            (14, 1, 1),  # validity area type 1
            (15, 4, 3),  # validity area 1
            (19, 14, DAY_2024_01_01),  # start date 1
            (33, 14, DAY_2024_01_01 + 29),  # end date 1
            (96, 14, 1234),  # loaded product
            (110, 14, DAY_2024_01_01 - 1),  # loading date
            (124, 11, 720),  # loading time
            (135, 9, 30),  # loaded length
            (144, 20, 5500),  # loaded price
            (164, 14, 45),  # loading organisation
            (178, 14, 1001),  # loading device
            (192, 14, DAY_2024_01_01),  # boarding date
            (206, 11, 480),  # boarding time
            (217, 14, 1234),  # vehicle
            (231, 2, 1),  # location number type
            (233, 14, 567),  # location number
            (247, 1, 1),  # direction
            (248, 4, 2),  # area
        ],
    )
    stored_value = pack(
        12,
        [
            (0, 20, 1550),
            (20, 14, DAY_2024_01_01 - 6),
            (34, 11, 900),
            (45, 20, 2000),
            (65, 14, 45),
            (79, 14, 77),
        ],
    )
    history = pack(
        12,
        [
            (0, 1, 0),
            (15, 11, 1430),
            (26, 14, DAY_2024_01_01 + 1),
            (40, 11, 10),
            (51, 14, 0),
            (65, 5, 1),
        ],
    ) + bytes(84)
    return {
        "application_information": _app_info(),
        "period_pass": period_pass,
        "stored_value": stored_value,
        "ticket": bytes(26),
        "history": history,
    }


@pytest.fixture
def revised_files(pack):
    return {
        "application_information": _app_info(),
        "control_information": b"\x80" + bytes(5),
        "period_pass": pack(35, [(0, 1, 1), (1, 14, 2000), (15, 2, 2), (17, 6, 33), (272, 2, 3)]),
        "stored_value": pack(12, [(0, 20, 990)]),
        "ticket": bytes(45),
    }


def test_legacy_application_info_nibbles(legacy_files):
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)

    assert card.ok
    assert card.error_status is ErrorStatus.OK
    assert card.format_version is FormatVersion.LEGACY
    assert card.application_info.application_version == 0x20
    assert card.application_info.application_key_version == 0x01
    assert card.application_info.application_instance_id == VALID_CARD_NUMBER
    assert card.application_info.platform_type == 0xA0
    assert card.application_info.security_level == 0x10
    assert card.app_status is None


def test_legacy_period_pass(legacy_files):
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)

    slot = card.period_pass_1
    assert slot.in_use
    assert slot.product_code == 1234
    assert slot.product_code_type is None
    assert slot.validity_area_type == 1
    assert slot.validity_area == 3
    assert slot.start_date == datetime(2024, 1, 1, tzinfo=UTC)
    assert slot.end_date == datetime(2024, 1, 30, 23, 59, 59, tzinfo=UTC)
    assert slot.length_days == 30

    assert not card.period_pass_2.in_use

    load = card.last_load
    assert load.product_code == 1234
    assert load.loading_date == datetime(2023, 12, 31, 12, 0, tzinfo=UTC)
    assert load.loaded_length == 30
    assert load.loaded_price == 5500
    assert load.loading_organisation == 45
    assert load.loading_device == 1001

    boarding = card.last_boarding
    assert boarding.boarding_date == datetime(2024, 1, 1, 8, 0, tzinfo=UTC)
    assert boarding.vehicle == 1234
    assert boarding.location_number_type == 1
    assert boarding.location_number == 567
    assert boarding.direction == 1
    assert boarding.area == 2
    assert boarding.area_type is None


def test_legacy_stored_value_and_history(legacy_files):
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)

    assert card.stored_value.balance == 1550
    assert card.stored_value.loading_date == datetime(2023, 12, 26, 15, 0, tzinfo=UTC)
    assert card.stored_value.loading_time == 900
    assert card.stored_value.loaded_value == 2000
    assert card.stored_value.loading_organisation == 45
    assert card.stored_value.loading_device == 77

    assert card.value_ticket.unused
    assert len(card.history) == 1
    assert card.history[0].transaction_type is TransactionType.SEASON_PASS
    assert card.history[0].boarding_date == datetime(2024, 1, 1, 23, 50, tzinfo=UTC)


def test_short_period_pass_is_data_failure(legacy_files, caplog):
    legacy_files["period_pass"] = legacy_files["period_pass"][:20]

    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)

    assert card.error_status is ErrorStatus.DATA_FAILURE
    assert not card.ok
    assert card.period_pass_1 is None
    assert card.period_pass_2 is None
    assert card.application_info is None
    assert card.value_ticket is None
    assert card.history == ()
    assert "period_pass" in caplog.text


@pytest.mark.parametrize(
    "name,length",
    [("application_information", 10), ("stored_value", 11), ("ticket", 25)],
)
def test_any_short_file_is_data_failure(legacy_files, name, length):
    legacy_files[name] = legacy_files[name][:length]
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)
    assert card.error_status is ErrorStatus.DATA_FAILURE


def test_legacy_period_pass_too_short_for_revised(legacy_files):
    # 32 bytes satisfy the legacy layout but not the revised one
    files = dict(legacy_files, control_information=bytes(6), ticket=bytes(45))
    card = decode_travel_card(FormatVersion.REVISED, tz=UTC, **files)
    assert card.error_status is ErrorStatus.DATA_FAILURE


def test_missing_history_gives_no_entries(legacy_files):
    legacy_files.pop("history")
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)
    assert card.ok
    assert card.history == ()


def test_revised_card(revised_files):
    card = decode_travel_card(FormatVersion.REVISED, tz=UTC, **revised_files)

    assert card.ok
    assert card.format_version is FormatVersion.REVISED
    assert card.app_status == 1
    assert card.period_pass_1.product_code_type == 1
    assert card.period_pass_1.product_code == 2000
    assert card.period_pass_1.validity_area_type == 2
    assert card.period_pass_1.validity_area == 33
    assert card.period_pass_1.in_use is False
    assert card.last_boarding.area_type == 3
    assert card.stored_value.balance == 990
    assert card.stored_value.loading_date is None
    assert card.value_ticket.extra_zone is not None
    assert card.history == ()


def test_revised_card_requires_control_information(revised_files):
    revised_files.pop("control_information")
    card = decode_travel_card(FormatVersion.REVISED, tz=UTC, **revised_files)
    assert card.error_status is ErrorStatus.DATA_FAILURE


def test_card_number_check(legacy_files):
    legacy_files["application_information"] = _app_info(INVALID_CARD_NUMBER)

    unchecked = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)
    checked = decode_travel_card(FormatVersion.LEGACY, tz=UTC, check_card_number=True, **legacy_files)

    assert unchecked.ok
    assert unchecked.application_info.card_number_valid is False
    assert checked.error_status is ErrorStatus.CARD_NUMBER_FAILURE
    assert checked.application_info is None


def test_valid_card_number_passes_check(legacy_files):
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, check_card_number=True, **legacy_files)
    assert card.ok
    assert card.application_info.card_number_valid is True


def test_accepts_mutable_buffers(legacy_files):
    files = {name: bytearray(data) for name, data in legacy_files.items()}
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **files)
    for data in files.values():
        data[:] = bytes(len(data))
    assert card.stored_value.balance == 1550


@pytest.mark.parametrize(
    "status", [ErrorStatus.NO_CARD, ErrorStatus.READ_FAILURE, ErrorStatus.CARD_NUMBER_FAILURE]
)
def test_error_travel_card(status):
    card = error_travel_card(status)
    assert card.error_status is status
    assert not card.ok
    assert card.format_version is None
    assert card.application_info is None
    assert card.stored_value is None


def test_travel_card_is_frozen(legacy_files):
    card = decode_travel_card(FormatVersion.LEGACY, tz=UTC, **legacy_files)
    with pytest.raises(ValidationError):
        card.error_status = ErrorStatus.NO_CARD
