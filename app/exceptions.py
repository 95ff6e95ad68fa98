"""
Application error taxonomy.

Services raise these; ``app.main`` maps them onto HTTP responses.  None of
them are retried or swallowed anywhere in the service layer.
"""


class BlogError(Exception):
    """Base class for all errors raised by the service layer."""


class ParseError(BlogError, ValueError):
    """A cursor token could not be decoded."""


class NullValueError(BlogError):
    """A cursor was encoded without an underlying value."""


class InvalidArgumentError(BlogError, ValueError):
    """A required argument (e.g. the viewer for a personal feed) is missing."""


class NotFoundError(BlogError):
    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class ForbiddenError(BlogError):
    """The viewer is not allowed to modify the target resource."""
