class SignatureError(ValueError):
    """Base class for every error raised while building a signature."""


class LengthMismatch(SignatureError):
    """The pattern and its mask have different lengths."""


class UnresolvableWildcard(SignatureError):
    """Every byte value is used as a literal, so none can stand for a wildcard."""


class MalformedToken(SignatureError):
    """A hybrid pattern token is neither hexadecimal nor a run of '?'."""

    def __init__(self, token, index: int):
        self.token = token
        self.index = index
        super().__init__(f"Invalid token '{token}' at index {index}")
