import re
import typing


def format_ida_pattern(pattern: bytes, wildcard: int, sep: str = " ") -> str:
    """
    Render a pattern as IDA style text.

    >>> format_ida_pattern(bytes([0x01, 0x00, 0x13, 0x14]), 0x00)
    '01 ?? 13 14'
    """
    return sep.join("??" if b == wildcard else f"{b:02X}" for b in pattern)


def byte_to_regex(value: int, wildcard: int) -> bytes:
    """Regex fragment matching one raw byte."""
    if value == wildcard:
        return b"."
    return re.escape(bytes([value]))


def to_regex(pattern: bytes, wildcard: int) -> typing.Pattern[bytes]:
    """
    Build a compiled regex equivalent to the pattern.

    DOTALL is required so that '.' also matches a newline byte (0x0A).
    """
    if not pattern:
        # an empty signature never matches
        return re.compile(b"(?!)")
    regex = b"".join(byte_to_regex(b, wildcard) for b in pattern)
    return re.compile(regex, re.DOTALL)
