"""
hsl_decoder.luhn

Luhn mod 10 check for HSL card numbers (application instance ids).
"""


def is_valid_luhn(number: str) -> bool:
    """
    True when ``number`` is a non-empty string of decimal digits whose Luhn
    checksum is divisible by 10. Any non-digit character makes it invalid.
    """
    if not number or not number.isdigit():
        return False

    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0
