import logging
import typing

from memsig.errors import UnresolvableWildcard

logger = logging.getLogger(__name__)

# characters of a hybrid pattern that never end up as literal bytes
HYBRID_IGNORED = frozenset(" ?")


def find_wildcard(
    values: typing.Iterable[int], is_literal: typing.Callable[[int], bool]
) -> int:
    """
    Pick the smallest byte value not used by any literal in `values`.

    `is_literal` is called once per value, in order, and decides whether
    the value occupies a literal position. Marks are never cleared, so a
    wildcard position holding the same value as an earlier literal does
    not free it up again.
    """
    used = [False] * 256
    for value in values:
        if is_literal(value):
            used[value] = True

    for candidate in range(256):
        if not used[candidate]:
            logger.debug("Resolved wildcard to 0x%02X", candidate)
            return candidate

    raise UnresolvableWildcard("unable to find unused byte in the provided pattern")


def find_wildcard_masked(
    pattern: typing.Sequence[int], mask: typing.Sequence, unknown
) -> int:
    """Positions whose mask entry is `unknown` do not constrain the choice."""
    mask_iter = iter(mask)
    return find_wildcard(pattern, lambda _: next(mask_iter) != unknown)


def find_wildcard_hybrid(text: str, literals: typing.Iterable[int] = ()) -> int:
    # The raw characters are scanned as well as the parsed bytes. This may
    # rule out values (e.g. 0x30 for "0") that never appear in the pattern.
    raw = (ord(ch) for ch in text if ch not in HYBRID_IGNORED)
    values = [value for value in raw if value < 256]
    values.extend(literals)
    return find_wildcard(values, lambda _: True)
