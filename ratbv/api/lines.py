"""API routes for scraped line topology."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from ..models.route import Direction
from ..services import route_identity
from ..services.errors import (
    DuplicateRouteIdError,
    InvalidRequestError,
    ScrapeFailure,
)
from ..services.scraper_service import ScraperService
from .dependencies import data_unavailable, get_scraper_service

router = APIRouter()


class StationSelection(BaseModel):
    """Schema for creating a route from one station of a scraped line."""

    station_url: str


def _parse_direction(value: str) -> Direction:
    try:
        return Direction.parse(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown direction: {value}") from exc


@router.get("/topology")
async def get_line_topology(
    url: str = Query("", description="Master URL, e.g. https://www.ratbv.ro/afisaje/23b-dus.html"),
    service: ScraperService = Depends(get_scraper_service),
):
    """Scrape the line name and ordered stations behind a master URL."""
    try:
        topology = await service.fetch_line_topology(url)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ScrapeFailure as exc:
        raise data_unavailable(exc) from exc
    return topology.to_dict()


@router.get("/{line_number}")
async def get_line(line_number: str, service: ScraperService = Depends(get_scraper_service)):
    """Both directions of a line; inbound may be a reversed outbound fallback."""
    try:
        directions = await service.fetch_line_directions(line_number)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ScrapeFailure as exc:
        raise data_unavailable(exc) from exc
    return {
        "line_number": line_number.lower(),
        "directions": {direction.value: topology.to_dict() for direction, topology in directions.items()},
    }


@router.post("/{line_number}/{direction}/routes", status_code=status.HTTP_201_CREATED)
async def create_route_from_station(
    line_number: str,
    direction: str,
    selection: StationSelection,
    service: ScraperService = Depends(get_scraper_service),
):
    """Register the route for a station picked from the live station list."""
    parsed_direction = _parse_direction(direction)
    url = route_identity.master_url(line_number, parsed_direction, service.config.ratbv_base_url)
    try:
        topology = await service.fetch_line_topology(url)
        route = service.create_route_from_station(topology, selection.station_url)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DuplicateRouteIdError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ScrapeFailure as exc:
        raise data_unavailable(exc) from exc
    return route.to_dict()
