import logging
import mmap
import typing

from memsig import sigtext
from memsig.parser import ByteMask, hybrid_to_wildcard, masked_to_wildcard

logger = logging.getLogger(__name__)

# buffers whose .find() takes byte offsets
NATIVE_FIND_TYPES = (bytes, bytearray, mmap.mmap)


def _wildcard_value(wildcard) -> int:
    if isinstance(wildcard, (bytes, bytearray)):
        if len(wildcard) != 1:
            raise ValueError(f"wildcard must be a single byte, got {wildcard!r}")
        return wildcard[0]
    if not 0 <= wildcard <= 0xFF:
        raise ValueError(f"wildcard must be in range(0, 256), got {wildcard}")
    return wildcard


def _longest_literal_run(pattern: bytes, wildcard: int) -> tuple[int, bytes]:
    """Returns (offset, bytes) of the longest run without a wildcard."""
    best_start, best_len = 0, 0
    i = 0
    while i < len(pattern):
        if pattern[i] == wildcard:
            i += 1
            continue
        start = i
        while i < len(pattern) and pattern[i] != wildcard:
            i += 1
        if i - start > best_len:
            best_start, best_len = start, i - start
    return best_start, pattern[best_start : best_start + best_len]


class Signature:
    """
    A byte pattern where positions holding `wildcard` match any byte.

    Build one with the constructor (explicit wildcard value), with
    `from_mask` (pattern plus mask) or with `from_hybrid` (IDA style text).
    Instances are immutable and can be searched from several threads at
    once.

    >>> sig = Signature.from_hybrid("01 ?? 13 14")
    >>> sig.find(bytes([0xAA, 0x01, 0xFF, 0x13, 0x14]))
    1
    """

    __slots__ = ("_pattern", "_wildcard", "_literals", "_anchor")

    def __init__(self, pattern: typing.Iterable[int] = b"", wildcard=None):
        pattern = bytes(pattern)
        if wildcard is None:
            if pattern:
                raise TypeError("a non-empty pattern requires an explicit wildcard")
            wildcard = 0
        self._init(pattern, _wildcard_value(wildcard))

    def _init(self, pattern: bytes, wildcard: int):
        if hasattr(self, "_pattern"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, "_pattern", pattern)
        object.__setattr__(self, "_wildcard", wildcard)
        literals = tuple((i, b) for i, b in enumerate(pattern) if b != wildcard)
        object.__setattr__(self, "_literals", literals)
        object.__setattr__(self, "_anchor", _longest_literal_run(pattern, wildcard))
        logger.debug(
            "Built signature of %d bytes with wildcard 0x%02X", len(pattern), wildcard
        )

    @classmethod
    def _from_parts(cls, pattern: bytes, wildcard: int) -> "Signature":
        sig = cls.__new__(cls)
        sig._init(pattern, wildcard)
        return sig

    @classmethod
    def from_wildcard(cls, pattern: typing.Iterable[int], wildcard) -> "Signature":
        """
        Every byte equal to `wildcard` is a wildcard. No check is made that
        the value is not also meant as a literal.
        """
        return cls(pattern, wildcard)

    @classmethod
    def from_mask(
        cls, pattern: typing.Iterable[int], mask: ByteMask, unknown=None
    ) -> "Signature":
        """
        Build a signature from a pattern and a mask of equal length.

        A position is a wildcard when its mask entry equals `unknown`
        ('?' for a text mask, 0 for a byte mask by default).

        >>> Signature.from_mask([0x11, 0x12, 0x13, 0x14], "x?xx")
        Signature('11 ?? 13 14', wildcard=0x00)
        """
        return cls._from_parts(*masked_to_wildcard(pattern, mask, unknown))

    @classmethod
    def from_hybrid(cls, text: typing.Union[str, bytes, bytearray]) -> "Signature":
        """
        Build a signature from IDA style text, e.g. "48 8B ?? ? 05".

        Each whitespace delimited token is one byte; "1" is the same as "01"
        and "?", "??" and "???" are all a single wildcard.
        """
        return cls._from_parts(*hybrid_to_wildcard(text))

    from_ida = from_hybrid

    @property
    def pattern(self) -> bytes:
        return self._pattern

    @property
    def wildcard(self) -> int:
        return self._wildcard

    @property
    def wildcards(self) -> int:
        return len(self._pattern) - len(self._literals)

    def literal_mask(self) -> bytes:
        """1 for every literal position and 0 for every wildcard."""
        return bytes(int(b != self._wildcard) for b in self._pattern)

    def __len__(self) -> int:
        return len(self._pattern)

    def __bool__(self) -> bool:
        return bool(self._pattern)

    def __eq__(self, other):
        if not isinstance(other, Signature):
            return NotImplemented
        return (self._pattern, self._wildcard) == (other._pattern, other._wildcard)

    def __hash__(self):
        return hash((self._pattern, self._wildcard))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return type(self).from_wildcard, (self._pattern, self._wildcard)

    def __copy__(self):
        return self._from_parts(self._pattern, self._wildcard)

    def __deepcopy__(self, memo):
        return self.__copy__()

    def __str__(self):
        return sigtext.format_ida_pattern(self._pattern, self._wildcard)

    def __repr__(self):
        return f"{type(self).__name__}('{self}', wildcard=0x{self._wildcard:02X})"

    def to_regex(self) -> typing.Pattern[bytes]:
        return sigtext.to_regex(self._pattern, self._wildcard)

    def _matches_at(self, view: memoryview, start: int) -> bool:
        for j, b in self._literals:
            if view[start + j] != b:
                return False
        return True

    def matches(self, data, offset: int = 0) -> bool:
        """Whether the signature matches `data` starting exactly at `offset`."""
        length = len(self._pattern)
        with memoryview(data) as raw, raw.cast("B") as view:
            if not length or offset < 0 or offset + length > len(view):
                return False
            return self._matches_at(view, offset)

    def find(self, data, first: int = 0, last: typing.Optional[int] = None) -> int:
        """
        Searches for the first occurrence in data[first:last].

        `data` is anything supporting the buffer protocol and is never
        copied. `first` and `last` are clamped like slice indices. Returns
        the offset of the match in `data`, or `last` when there is none or
        when the signature is empty.
        """
        with memoryview(data) as raw, raw.cast("B") as view:
            first, last, _ = slice(first, last).indices(len(view))
            length = len(self._pattern)
            if not length or last - first < length:
                return last

            # last valid start offset
            stop = last - length
            offset, anchor = self._anchor
            if not anchor:
                return first

            if isinstance(data, NATIVE_FIND_TYPES):
                pos = first + offset
                end = stop + offset + len(anchor)
                while True:
                    pos = data.find(anchor, pos, end)
                    if pos == -1:
                        return last
                    if self._matches_at(view, pos - offset):
                        return pos - offset
                    pos += 1

            for start in range(first, stop + 1):
                if self._matches_at(view, start):
                    return start
            return last

    def search(
        self, data, first: int = 0, last: typing.Optional[int] = None
    ) -> typing.Optional[int]:
        """Same as `find` but returns None when nothing matches."""
        with memoryview(data) as raw:
            _, end, _ = slice(first, last).indices(raw.nbytes)
        result = self.find(data, first, last)
        return None if result == end else result


def ida_signature(text: typing.Union[str, bytes, bytearray]) -> Signature:
    """Shorthand for `Signature.from_hybrid`."""
    return Signature.from_hybrid(text)
