"""Router error classes.

"No route" is not an error: routing calls return None when nothing connects
the two tokens. Exceptions are reserved for configuration defects.
"""


class RouterError(Exception):
    """Base error for routing operations."""

    pass


class ConfigError(RouterError):
    """Routing configuration is malformed (e.g. a percent step not dividing 100)."""

    pass


class UnsupportedSplitDegreeError(RouterError):
    """The split search was asked to combine four or more routes."""

    pass
