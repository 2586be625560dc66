import logging
import string
import typing

from memsig.errors import LengthMismatch, MalformedToken
from memsig.wildcard import find_wildcard_hybrid, find_wildcard_masked

logger = logging.getLogger(__name__)

DEFAULT_TEXT_UNKNOWN = "?"
DEFAULT_BYTE_UNKNOWN = 0

HEX_DIGITS = frozenset(string.hexdigits)

ByteMask = typing.Union[str, bytes, bytearray, typing.Iterable[int]]


def masked_to_wildcard(
    pattern: typing.Iterable[int], mask: ByteMask, unknown=None
) -> tuple[bytes, int]:
    """
    Converts a pattern and a parallel mask into (pattern bytes, wildcard).

    A text mask compares characters (default unknown is '?'), any other mask
    compares byte values (default unknown is 0). Wildcard positions are
    replaced by the resolved wildcard, every other byte is kept as is.
    """
    pattern = bytes(pattern)
    if isinstance(mask, str):
        if unknown is None:
            unknown = DEFAULT_TEXT_UNKNOWN
        elif isinstance(unknown, int):
            unknown = chr(unknown)
    else:
        mask = bytes(mask)
        if unknown is None:
            unknown = DEFAULT_BYTE_UNKNOWN
        elif isinstance(unknown, str):
            unknown = ord(unknown)

    if len(pattern) != len(mask):
        raise LengthMismatch(
            f"pattern size ({len(pattern)}) did not match mask size ({len(mask)})"
        )

    wildcard = find_wildcard_masked(pattern, mask, unknown)
    out = bytearray(pattern)
    for i, entry in enumerate(mask):
        if entry == unknown:
            out[i] = wildcard
    return bytes(out), wildcard


class HybridParser:
    """
    Parses IDA style patterns such as "48 8B ? ?? 05".

    Every whitespace delimited token produces exactly one byte: a token made
    of '?' characters is a wildcard, a token made of hex digits is a literal.
    Any character for which str.isspace() is true separates tokens, not
    only the space character, so tabs, newlines and Unicode spaces such as
    U+3000 split tokens too.
    """

    def __init__(self, text: typing.Union[str, bytes, bytearray]):
        if not isinstance(text, str):
            text = self._decode(bytes(text))
        self.text = text
        self.tokens: list[typing.Optional[int]] = []

    @staticmethod
    def _decode(raw: bytes) -> str:
        try:
            return raw.decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedToken(raw[e.start : e.end], e.start) from e

    def parse(self) -> tuple[bytes, int]:
        self._parse_pattern_string()
        literals = [token for token in self.tokens if token is not None]
        wildcard = find_wildcard_hybrid(self.text, literals)
        pattern = bytes(wildcard if token is None else token for token in self.tokens)
        logger.debug(
            "Parsed %d tokens (%d wildcards) from %r",
            len(pattern),
            len(pattern) - len(literals),
            self.text,
        )
        return pattern, wildcard

    def _parse_pattern_string(self):
        """Walks the text token by token."""
        p = self.text
        length = len(p)
        i = 0
        while i < length:
            ch = p[i]
            if ch.isspace():
                i += 1
                continue
            end = self._token_end(i)
            if ch == "?":
                self._parse_wildcard(p[i:end], i)
            else:
                self._parse_hex_byte(p[i:end], i)
            i = end

    def _token_end(self, i: int) -> int:
        p = self.text
        while i < len(p) and not p[i].isspace():
            i += 1
        return i

    def _parse_wildcard(self, token: str, i: int):
        """'?', '??', '???' and so on all collapse into one wildcard."""
        if token.strip("?"):
            raise MalformedToken(token, i)
        self.tokens.append(None)

    def _parse_hex_byte(self, token: str, i: int):
        # int(x, 16) alone would also accept "0x1F" and "1_F"
        if not HEX_DIGITS.issuperset(token):
            raise MalformedToken(token, i)
        value = int(token, 16)
        if value > 0xFF:
            raise MalformedToken(token, i)
        self.tokens.append(value)


def hybrid_to_wildcard(text: typing.Union[str, bytes, bytearray]) -> tuple[bytes, int]:
    return HybridParser(text).parse()
