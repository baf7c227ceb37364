"""
hsl_decoder.layouts

Declarative record layouts for HSL card files, loaded from the bundled
layouts.yml (or an override path).

Every (record, version) pair maps to one RecordLayout: a table of bit-field
signals that a single generic routine decodes with read_bits.

Functions:
    - load_layouts: Loads and validates a layout file into a LayoutSet
    - default_layouts: Cached LayoutSet from HSL_LAYOUT_PATH or the bundled file
    - get_layout: Looks up one layout in the default set

Notes:
    - Layout loading validates that min_length covers every signal, so a buffer
      that passes the length check can never fail inside read_bits.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Optional, Tuple

import yaml

from common.models import FormatVersion

from .bits import MAX_BIT_LENGTH, read_bits

logger = logging.getLogger(__name__)

LAYOUT_PATH_ENV = "HSL_LAYOUT_PATH"


class CardDataError(ValueError):
    """A card file is shorter than the layout for its format version requires."""


def _default_path() -> str:
    """Path of the layout file bundled as package data."""
    return str(resources.files(__package__) / "config" / "layouts.yml")


@dataclass(frozen=True)
class Signal:
    name: str
    start_bit: int
    length: int
    scale: int = 1

    @property
    def end_bit(self) -> int:
        return self.start_bit + self.length


@dataclass(frozen=True)
class RecordLayout:
    """
    RecordLayout

    Bit layout of one card file (or one history entry) for one format version.

    Attributes:
        record (str): Record name, e.g. "period_pass".
        version (FormatVersion): Format version the layout applies to.
        min_length (int): Shortest accepted buffer, in bytes.
        signals (Tuple[Signal, ...]): Fields in file order.
        instance_id (Optional[Tuple[int, int]]): (start_byte, length) of the
            bytes whose hex string is the card/ticket number.
        seal_offset (Optional[Tuple[int, int]]): (after_bit, bits) shift applied
            by with_seals().
    """

    record: str
    version: FormatVersion
    min_length: int
    signals: Tuple[Signal, ...]
    instance_id: Optional[Tuple[int, int]] = None
    seal_offset: Optional[Tuple[int, int]] = None

    @property
    def key(self) -> Tuple[str, FormatVersion]:
        return self.record, self.version

    def fits(self, buffer: bytes) -> bool:
        return len(buffer) >= self.min_length

    def require(self, buffer: bytes) -> None:
        if not self.fits(buffer):
            raise CardDataError(
                f"{self.record} ({self.version.value}) needs at least {self.min_length} bytes, got {len(buffer)}"
            )

    def decode(self, buffer: bytes) -> Dict[str, int]:
        """Read every signal: raw bit field multiplied by its scale."""
        return {sig.name: read_bits(buffer, sig.start_bit, sig.length) * sig.scale for sig in self.signals}

    def instance_id_hex(self, buffer: bytes) -> str:
        if self.instance_id is None:
            raise ValueError(f"Layout {self.record}/{self.version.value} has no instance id")
        start, length = self.instance_id
        return buffer[start : start + length].hex()

    def with_seals(self) -> "RecordLayout":
        """
        Variant of a shared ticket layout stored on a single ticket, where seal
        bytes follow the fixed sale data. Signals at or after the seal position
        move by the seal width and the minimum length grows accordingly.
        """
        if self.seal_offset is None:
            return self
        after_bit, bits = self.seal_offset
        shifted = tuple(
            replace(sig, start_bit=sig.start_bit + bits) if sig.start_bit >= after_bit else sig
            for sig in self.signals
        )
        return replace(
            self,
            min_length=self.min_length + bits // 8,
            signals=shifted,
            seal_offset=None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record": self.record,
            "version": self.version.value,
            "min_length": self.min_length,
            "instance_id": list(self.instance_id) if self.instance_id else None,
            "seal_offset": list(self.seal_offset) if self.seal_offset else None,
            "signals": [
                {"name": s.name, "start_bit": s.start_bit, "length": s.length, "scale": s.scale}
                for s in self.signals
            ],
        }


@dataclass(frozen=True)
class LayoutSet:
    path: str
    version: str
    spec_document: str
    layouts: Dict[Tuple[str, FormatVersion], RecordLayout] = field(default_factory=dict)

    def get(self, record: str, version: FormatVersion) -> RecordLayout:
        try:
            return self.layouts[(record, FormatVersion(version))]
        except KeyError:
            raise KeyError(f"No layout for record '{record}' version '{FormatVersion(version).value}'") from None

    def min_length(self, record: str, version: FormatVersion) -> int:
        return self.get(record, version).min_length


def _parse_layout(entry: dict) -> RecordLayout:
    name = entry.get("record", "<unnamed>")
    try:
        version = FormatVersion(entry["version"])
        signals = tuple(
            Signal(
                name=sig["name"],
                start_bit=int(sig["start_bit"]),
                length=int(sig["length"]),
                scale=int(sig.get("scale", 1)),
            )
            for sig in entry["signals"]
        )
        instance_id = None
        if "instance_id" in entry:
            instance_id = (int(entry["instance_id"]["start_byte"]), int(entry["instance_id"]["length"]))
        seal_offset = None
        if "seal_offset" in entry:
            seal_offset = (int(entry["seal_offset"]["after_bit"]), int(entry["seal_offset"]["bits"]))
        layout = RecordLayout(
            record=entry["record"],
            version=version,
            min_length=int(entry["min_length"]),
            signals=signals,
            instance_id=instance_id,
            seal_offset=seal_offset,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed layout '{name}': {e}") from e

    for sig in layout.signals:
        if not 0 < sig.length <= MAX_BIT_LENGTH:
            raise ValueError(f"Layout '{name}': signal '{sig.name}' has invalid length {sig.length}")
        if sig.end_bit > layout.min_length * 8:
            raise ValueError(
                f"Layout '{name}' ({version.value}): signal '{sig.name}' ends at bit "
                f"{sig.end_bit}, beyond min_length {layout.min_length} bytes"
            )
    if layout.instance_id and sum(layout.instance_id) > layout.min_length:
        raise ValueError(f"Layout '{name}' ({version.value}): instance id beyond min_length")
    return layout


def load_layouts(layout_path_override: Optional[str] = None) -> LayoutSet:
    """
    Load and validate the record layouts.

    Path selection logic:
      - If layout_path_override is provided and readable, use it.
      - Else use the layouts.yml bundled with this package.

    Raises:
        ValueError: the file is not a layout document or a layout is malformed.
    """
    layout_path = _default_path()
    if layout_path_override:
        if os.path.exists(layout_path_override) and os.access(layout_path_override, os.R_OK):
            logger.info(f"Using layout override: {layout_path_override}")
            layout_path = layout_path_override
        else:
            logger.warning(
                f"Layout override path provided but not found/readable: "
                f"{layout_path_override}. Using default: {layout_path}"
            )
    else:
        logger.debug(f"Using default layout path: {layout_path}")

    with open(layout_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or not isinstance(raw.get("layouts"), list):
        raise ValueError(f"Layout file {layout_path} has no 'layouts' list")

    layouts: Dict[Tuple[str, FormatVersion], RecordLayout] = {}
    for entry in raw["layouts"]:
        layout = _parse_layout(entry)
        if layout.key in layouts:
            raise ValueError(f"Duplicate layout '{layout.record}' ({layout.version.value})")
        layouts[layout.key] = layout

    logger.debug(f"Loaded {len(layouts)} record layouts from {layout_path}")
    return LayoutSet(
        path=layout_path,
        version=str(raw.get("version", "")),
        spec_document=str(raw.get("spec_document", "")),
        layouts=layouts,
    )


@lru_cache(maxsize=1)
def default_layouts() -> LayoutSet:
    return load_layouts(os.getenv(LAYOUT_PATH_ENV))


def get_layout(record: str, version: FormatVersion) -> RecordLayout:
    return default_layouts().get(record, version)
