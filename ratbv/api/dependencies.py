"""Shared FastAPI dependencies and error translation."""

from typing import Optional

from fastapi import HTTPException, status

from ..services.errors import ScrapeFailure
from ..services.scraper_service import ScraperService

_scraper_service: Optional[ScraperService] = None


def get_scraper_service() -> ScraperService:
    """FastAPI dependency returning the process-wide scraper service."""
    global _scraper_service
    if _scraper_service is None:
        _scraper_service = ScraperService()
    return _scraper_service


def data_unavailable(exc: ScrapeFailure) -> HTTPException:
    """503 carrying the scrape diagnostic for operators."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"message": "data unavailable", "error": str(exc)},
    )
