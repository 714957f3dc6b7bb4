"""Error types raised by the scraping and caching core."""


class RatbvError(Exception):
    """Root error for the bus-times core."""


class ScrapeFailure(RatbvError):
    """The browser could not produce the requested data.

    Covers process launch failures, navigation timeouts, missing frames and
    missing elements. The message carries the underlying diagnostic.
    """


class ElementNotFound(ScrapeFailure):
    """A required element did not appear within the implicit wait."""


class RouteNotFoundError(RatbvError):
    """Raised when a route id or composite key has no matching record."""


class DuplicateRouteIdError(RatbvError):
    """Raised when creating a route whose id is already registered."""


class DuplicateRouteKeyError(DuplicateRouteIdError):
    """Raised when another route already covers the same line, direction and station."""


class InvalidRequestError(RatbvError):
    """Raised for malformed input such as a missing or unparsable URL."""


__all__ = [
    "RatbvError",
    "ScrapeFailure",
    "ElementNotFound",
    "RouteNotFoundError",
    "DuplicateRouteIdError",
    "DuplicateRouteKeyError",
    "InvalidRequestError",
]
