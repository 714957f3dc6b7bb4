"""API routes for single-station lookups."""

from fastapi import APIRouter, Depends, HTTPException, Query

from ..services.errors import InvalidRequestError, ScrapeFailure
from ..services.scraper_service import ScraperService
from .dependencies import data_unavailable, get_scraper_service

router = APIRouter()


@router.get("/name")
async def get_station_name(
    url: str = Query("", description="Per-station timetable URL"),
    service: ScraperService = Depends(get_scraper_service),
):
    """Scrape the station name displayed on a timetable page."""
    try:
        station_name = await service.lookup_station_name(url)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ScrapeFailure as exc:
        raise data_unavailable(exc) from exc
    return {"url": url, "station_name": station_name}
