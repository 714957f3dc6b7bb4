"""API routes for per-station bus times."""

from fastapi import APIRouter, Depends, HTTPException, Path

from ..models.route import Direction, Route
from ..models.timetable import TimetableResult
from ..services.errors import RouteNotFoundError, ScrapeFailure
from ..services.scraper_service import ScraperService
from .dependencies import data_unavailable, get_scraper_service

router = APIRouter()


def _payload(route: Route, result: TimetableResult) -> dict:
    return {
        "route": {
            "id": route.id,
            "name": route.name,
            "station_name": route.station_name,
            "first_station": route.first_station,
            "last_station": route.last_station,
        },
        **result.to_dict(),
    }


@router.get("/{route_id}")
async def get_route_timetable(
    route_id: str,
    service: ScraperService = Depends(get_scraper_service),
):
    """
    Get the bus times of a registered route.

    Served from the route's cache while it is fresh, scraped otherwise.
    """
    try:
        route = service.registry.get(route_id)
        result = await service.fetch_timetable(route)
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ScrapeFailure as exc:
        raise data_unavailable(exc) from exc
    return _payload(route, result)


@router.get("/{line_number}/{direction}/{station_slug}")
async def get_station_timetable(
    line_number: str = Path(..., description="Line number (e.g. '23b')"),
    direction: str = Path(..., description="Direction ('dus' or 'intors')"),
    station_slug: str = Path(..., description="Station slug"),
    service: ScraperService = Depends(get_scraper_service),
):
    """Get the bus times of a route by its line/direction/station key."""
    try:
        parsed_direction = Direction.parse(direction)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown direction: {direction}") from exc
    try:
        route = service.registry.find_by_key(line_number, parsed_direction, station_slug)
        result = await service.fetch_timetable(route)
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ScrapeFailure as exc:
        raise data_unavailable(exc) from exc
    return _payload(route, result)
