from datetime import timezone

import pytest
from fastapi.testclient import TestClient

import card_daemon.config as config_module
from card_daemon.main import app
from hsl_decoder.layouts import default_layouts


def pack_bits(size, fields):
    """
    Build a card file of ``size`` bytes from (start_bit, length, value) triples,
    MSB-first like the card itself.
    """
    total_bits = size * 8
    packed = 0
    for start_bit, length, value in fields:
        assert 0 <= value < (1 << length), f"value {value} does not fit in {length} bits"
        assert start_bit + length <= total_bits, f"field at {start_bit} exceeds {size} bytes"
        packed |= value << (total_bits - start_bit - length)
    return packed.to_bytes(size, byteorder="big")


@pytest.fixture
def pack():
    """The pack_bits helper as a fixture."""
    return pack_bits


@pytest.fixture
def build_record():
    """
    Build a buffer for a RecordLayout from signal values by name.

    Values are given as decoded (scaled) values; unspecified signals are zero.
    """

    def _build(layout, size=None, **values):
        signals = {sig.name: sig for sig in layout.signals}
        fields = []
        for name, value in values.items():
            sig = signals[name]
            fields.append((sig.start_bit, sig.length, value // sig.scale))
        return pack_bits(size or layout.min_length, fields)

    return _build


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    Synchronous TestClient fixture for FastAPI.
    Use this for standard API endpoint testing.
    """
    with TestClient(app=app, base_url="http://test") as c:
        yield c


@pytest.fixture
def utc_decoder_config(mocker):
    """Decode API requests in UTC with card number validation off."""
    decoder_config = {"timezone": timezone.utc, "validate_card_number": False}
    mocker.patch("card_daemon.api_routers.cards.get_decoder_config", return_value=decoder_config)
    return decoder_config


# --- Global state reset fixtures for test isolation ---


@pytest.fixture(autouse=True)
def reset_cached_config(monkeypatch):
    """
    Automatically drop cached layouts and decoder settings around each test so
    environment overrides set by one test never leak into another.
    """
    monkeypatch.delenv("HSL_LAYOUT_PATH", raising=False)
    default_layouts.cache_clear()
    config_module.DECODER_CONFIG = None
    yield
    default_layouts.cache_clear()
    config_module.DECODER_CONFIG = None
