"""Shortcode generation utility

This module turns the store's monotonic counter into short codes.

Functions:
    encode_base62(value):
        Encode a non-negative integer with the fixed Base62 alphabet.
    decode_base62(shortcode):
        Inverse of encode_base62().
    validate_code(shortcode):
        Check that a (custom) shortcode is non-empty and alphanumeric.

Classes:
    CodeAllocator:
        Allocate the next counter value from a DAO and encode it.

Example:
    >>> from snaplink.utils import encode_base62
    >>> encode_base62(0), encode_base62(61), encode_base62(62)
    ('0', 'Z', '10')
"""

import re
import string
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snaplink.dao.base import LinkBaseDAO


# Digit value order: 0-9 -> 0..9, a-z -> 10..35, A-Z -> 36..61
ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)

_CODE_PATTERN = re.compile(r'[A-Za-z0-9]+')


def encode_base62(value: int) -> str:
    """Encode a counter value as a Base62 string.

    Codes are never padded, so their length grows with the counter and two
    different values never map to the same code.

    Args:
        value (int):
            Non-negative integer, typically a freshly allocated counter value.

    Returns:
        str: Base62 representation of `value` ('0' for 0).

    Example:
        >>> encode_base62(1)
        '1'
        >>> encode_base62(125)
        '21'
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f'Value must be of type integer (given type: {type(value)}).')
    if value < 0:
        raise ValueError(f'Value must be a non-negative integer (given value: {value}).')

    if value == 0:
        return ALPHABET[0]

    digits = []
    while value > 0:
        value, remainder = divmod(value, BASE)
        digits.append(ALPHABET[remainder])
    return ''.join(reversed(digits))


def decode_base62(shortcode: str) -> int:
    """Decode a Base62 string produced by encode_base62().

    Raises:
        ValueError: If the shortcode is empty or contains non-Base62 characters.
    """
    if not validate_code(shortcode):
        raise ValueError(f'Not a Base62 code: {shortcode!r}.')

    value = 0
    for character in shortcode:
        value = value * BASE + ALPHABET.index(character)
    return value


def validate_code(shortcode: str) -> bool:
    """Return True iff `shortcode` is non-empty and strictly ASCII alphanumeric."""
    return isinstance(shortcode, str) and _CODE_PATTERN.fullmatch(shortcode) is not None


class CodeAllocator:
    """Produce collision-free short codes from the store's counter.

    Uniqueness rests on the counter being strictly increasing. Custom codes
    share the same key space, so a generated code may still match a custom
    code with the same text; callers write generated codes with a create-only
    put to detect that.
    """

    def __init__(self, dao: 'LinkBaseDAO'):
        self.dao = dao

    def next_code(self) -> str:
        return encode_base62(self.dao.allocate_id())
