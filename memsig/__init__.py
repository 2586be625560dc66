"""
memsig: byte signatures with wildcards and a search over raw memory images.

    >>> from memsig import Signature
    >>> Signature.from_hybrid("48 8B ? 05").find(b"\\x90\\x48\\x8b\\xc1\\x05")
    1
"""
import logging

from memsig.errors import (
    LengthMismatch,
    MalformedToken,
    SignatureError,
    UnresolvableWildcard,
)
from memsig.signature import Signature, ida_signature

__version__ = "0.1.0"

__all__ = [
    "LengthMismatch",
    "MalformedToken",
    "Signature",
    "SignatureError",
    "UnresolvableWildcard",
    "ida_signature",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
