"""Error types raised by the envelope editor core."""


class ConfigurationError(ValueError):
    """Invalid editor configuration (ratios, box size, defaults, modes).

    Raised at construction time; the editor never tries to recover from it.
    """


class InvalidHandle(KeyError):
    """An unknown handle identifier was passed to a query or a drag."""

    def __init__(self, handle):
        super().__init__(handle)
        self.handle = handle

    def __str__(self):
        return f"Invalid handle: {self.handle!r}"
