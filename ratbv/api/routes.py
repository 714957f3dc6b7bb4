"""API routes for managing the registered bus routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from ..models.route import Direction, Route
from ..services.errors import DuplicateRouteIdError, InvalidRequestError, RouteNotFoundError
from ..services.scraper_service import ScraperService
from .dependencies import get_scraper_service

router = APIRouter()


class RouteCreate(BaseModel):
    """Schema for registering a route by hand (dashboard form)."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    station_name: str = Field("", alias="stationName")
    name: Optional[str] = None
    id: Optional[str] = None
    line_number: Optional[str] = Field(None, alias="lineNumber")
    direction: Optional[str] = None
    station_slug: Optional[str] = Field(None, alias="stationSlug")

    def to_route(self) -> Route:
        return Route(
            id=(self.id or "").strip(),
            name=(self.name or "").strip(),
            station_name=self.station_name.strip(),
            url=self.url.strip(),
            line_number=self.line_number.strip().lower() if self.line_number else None,
            direction=Direction.parse(self.direction) if self.direction else None,
            station_slug=self.station_slug.strip().lower() if self.station_slug else None,
        )


@router.get("")
async def list_routes(service: ScraperService = Depends(get_scraper_service)):
    """List every registered route, cache fields included."""
    routes = service.list_routes()
    return {"routes": [route.to_dict() for route in routes], "count": len(routes)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_route(
    payload: RouteCreate,
    service: ScraperService = Depends(get_scraper_service),
):
    """Register a route. Missing identity fields are derived from its URL."""
    try:
        route = service.create_route(payload.to_route())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid direction: {payload.direction}") from exc
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DuplicateRouteIdError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return route.to_dict()


@router.delete("/{route_id}")
async def delete_route(route_id: str, service: ScraperService = Depends(get_scraper_service)):
    """Remove a route from the registry."""
    try:
        service.delete_route(route_id)
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"success": True}


@router.delete("/{route_id}/cache")
async def invalidate_route_cache(
    route_id: str,
    service: ScraperService = Depends(get_scraper_service),
):
    """Drop the cached timetable so the next view scrapes again."""
    try:
        route = service.invalidate_cache(route_id)
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"success": True, "route": route.to_dict()}
