"""Services for scraping, caching and storing bus routes."""

from .cache_service import CacheService, is_fresh
from .errors import (
    DuplicateRouteIdError,
    DuplicateRouteKeyError,
    ElementNotFound,
    InvalidRequestError,
    RatbvError,
    RouteNotFoundError,
    ScrapeFailure,
)
from .route_registry import RouteRegistry
from .scraper_service import ScraperService

__all__ = [
    "CacheService",
    "DuplicateRouteIdError",
    "DuplicateRouteKeyError",
    "ElementNotFound",
    "InvalidRequestError",
    "RatbvError",
    "RouteNotFoundError",
    "RouteRegistry",
    "ScrapeFailure",
    "ScraperService",
    "is_fresh",
]
