"""
hsl_decoder.bits

Bit-field extraction for HSL card files.

Card files are packed MSB-first: bit 0 is the most significant bit of byte 0,
and fields freely cross byte boundaries.

Functions:
    - read_bits: Extracts an unsigned big-endian bitfield of up to 25 bits
    - read_byte_value: read_bits capped to 8 bits
    - read_short_value: read_bits capped to 16 bits
"""

MAX_BIT_LENGTH = 25


def read_bits(buffer: bytes, bit_offset: int, bit_length: int) -> int:
    """
    Extract an unsigned, MSB-first bitfield from a card file buffer.

    Only the whole bytes covering the field are loaded, so the field may
    end on the last bit of the buffer.

    Raises:
        ValueError: bit_length outside 1..25 or a negative bit_offset.
        IndexError: the field runs past the end of the buffer.
    """
    if not 0 < bit_length <= MAX_BIT_LENGTH:
        raise ValueError(f"bit_length must be between 1 and {MAX_BIT_LENGTH}, got {bit_length}")
    if bit_offset < 0:
        raise ValueError(f"bit_offset must not be negative, got {bit_offset}")

    byte_offset = bit_offset // 8
    bit_start = bit_offset % 8
    byte_count = (bit_start + bit_length + 7) // 8
    if byte_offset + byte_count > len(buffer):
        raise IndexError(
            f"bits {bit_offset}..{bit_offset + bit_length - 1} out of range "
            f"for a {len(buffer)}-byte buffer"
        )

    raw_int = int.from_bytes(buffer[byte_offset : byte_offset + byte_count], byteorder="big")
    mask = (1 << bit_length) - 1
    return (raw_int >> (byte_count * 8 - bit_start - bit_length)) & mask


def read_byte_value(buffer: bytes, bit_offset: int, bit_length: int) -> int:
    """read_bits for fields of at most one byte; longer lengths are cut to 8."""
    return read_bits(buffer, bit_offset, min(bit_length, 8))


def read_short_value(buffer: bytes, bit_offset: int, bit_length: int) -> int:
    """read_bits for fields of at most two bytes; longer lengths are cut to 16."""
    return read_bits(buffer, bit_offset, min(bit_length, 16))
