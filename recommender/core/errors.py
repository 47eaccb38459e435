"""Exceptions raised by the recommendation core."""


class InvalidProfileError(ValueError):
    """The preference profile cannot produce a meaningful recommendation."""


class InvalidPostingError(ValueError):
    """A posting is structurally invalid (missing id or title) and cannot be scored."""
