"""Shared fixtures: an in-memory stand-in for the RATBV frameset site."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ratbv.api.dependencies import get_scraper_service
from ratbv.config import Settings
from ratbv.main import app
from ratbv.services.browser import by_class, by_id, by_tag
from ratbv.services.cache_service import CacheService
from ratbv.services.errors import ElementNotFound, ScrapeFailure
from ratbv.services.route_registry import RouteRegistry
from ratbv.services.scraper_service import ScraperService
from ratbv.services.scrapers.line_metadata import STATION_MARKER_CLASSES

BASE_URL = "https://www.ratbv.ro/afisaje/"
OUTBOUND_URL = BASE_URL + "23b-dus.html"
INBOUND_URL = BASE_URL + "23b-intors.html"
STATION_LIST_URL = BASE_URL + "23b-dus/div_list_ro.html"
STATION_URLS = [BASE_URL + f"23b-dus/line_23b_{index}_cl1_ro.html" for index in (1, 2, 3)]
STATION_SELECTOR = by_class(*STATION_MARKER_CLASSES)


@dataclass
class FakeElement:
    text: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    children: Dict[str, List["FakeElement"]] = field(default_factory=dict)


@dataclass
class FakeFrame:
    url: str
    elements: Dict[str, List[FakeElement]] = field(default_factory=dict)
    child_frames: List["FakeFrame"] = field(default_factory=list)


class FakeSession:
    """Implements the BrowserSession surface over FakeFrame documents."""

    def __init__(self, pages: Dict[str, FakeFrame]):
        self.pages = pages
        self.navigated: List[str] = []
        self.frame_calls: List[Optional[int]] = []
        self._top: Optional[FakeFrame] = None
        self._frame: Optional[FakeFrame] = None

    @property
    def current_url(self) -> str:
        return self._frame.url if self._frame else ""

    def navigate(self, url: str) -> None:
        self.navigated.append(url)
        if url not in self.pages:
            raise ScrapeFailure(f"Timed out loading {url}")
        self._top = self._frame = self.pages[url]

    def switch_to_frame(self, index: Optional[int] = None) -> None:
        self.frame_calls.append(index)
        if index is None:
            self._frame = self._top
            return
        if index >= len(self._frame.child_frames):
            raise ScrapeFailure(f"Frame index {index} out of range")
        self._frame = self._frame.child_frames[index]

    def find_elements(self, selector: str, within: Optional[FakeElement] = None) -> List[FakeElement]:
        scope = within.children if within is not None else self._frame.elements
        return list(scope.get(selector, []))

    def find_element(self, selector: str, within: Optional[FakeElement] = None) -> FakeElement:
        matches = self.find_elements(selector, within)
        if not matches:
            raise ElementNotFound(f"No element matches {selector!r}")
        return matches[0]

    def get_text(self, element: FakeElement) -> str:
        return element.text

    def get_attribute(self, element: FakeElement, name: str) -> Optional[str]:
        return element.attrs.get(name)


class FakeBrowser:
    """Session factory counting how often a browser is launched and closed."""

    def __init__(self, pages: Dict[str, FakeFrame]):
        self.pages = pages
        self.opened = 0
        self.closed = 0
        self.sessions: List[FakeSession] = []

    @contextlib.contextmanager
    def session(self) -> Iterator[FakeSession]:
        self.opened += 1
        session = FakeSession(self.pages)
        self.sessions.append(session)
        try:
            yield session
        finally:
            self.closed += 1


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def timetable_page(url: str, hours: List[str], minute_groups: List[List[str]]) -> FakeFrame:
    wrappers = [
        FakeElement(children={by_id("web_min"): [FakeElement(text=minute) for minute in group]})
        for group in minute_groups
    ]
    table = FakeElement(
        children={
            by_id("web_class_hours"): [FakeElement(text=hour) for hour in hours],
            by_id("web_class_minutes"): wrappers,
        }
    )
    return FakeFrame(url=url, elements={by_id("tabel2"): [table]})


def station_entry(name: str, href: Optional[str]) -> FakeElement:
    children = {by_tag("b"): [FakeElement(text=name)]}
    if href is not None:
        children[by_tag("a")] = [FakeElement(attrs={"href": href})]
    return FakeElement(children=children)


def master_page(url: str, list_url: str, line_name: str, stations: List[FakeElement]) -> FakeFrame:
    heading = FakeElement(children={by_tag("b"): [FakeElement(text=line_name)]})
    return FakeFrame(
        url=url,
        child_frames=[
            FakeFrame(url=url.replace(".html", "/header.html")),
            FakeFrame(url=list_url, elements={STATION_SELECTOR: stations}),
            FakeFrame(url=url.replace(".html", "/main.html"), elements={by_id("linia_web"): [heading]}),
        ],
    )


def station_page(url: str, station_name: str) -> FakeFrame:
    label = FakeElement(children={by_tag("b"): [FakeElement(text=station_name)]})
    return FakeFrame(
        url=url,
        child_frames=[
            FakeFrame(url=url + "#header"),
            FakeFrame(url=url + "#list"),
            FakeFrame(url=url + "#main", elements={by_id("statie_web"): [label]}),
        ],
    )


def build_site() -> Dict[str, FakeFrame]:
    """Line 23B outbound with three stations; the inbound page is missing."""
    stations = [
        station_entry(" Sala Sporturilor ", "line_23b_1_cl1_ro.html"),
        station_entry("Stadion", "line_23b_2_cl1_ro.html"),
        station_entry("Gara", "line_23b_3_cl1_ro.html"),
    ]
    return {
        OUTBOUND_URL: master_page(OUTBOUND_URL, STATION_LIST_URL, "Linia 23B", stations),
        STATION_URLS[0]: timetable_page(STATION_URLS[0], ["7", "8"], [["05", "20"], ["10"]]),
        STATION_URLS[1]: timetable_page(STATION_URLS[1], [], []),
        STATION_URLS[2]: timetable_page(STATION_URLS[2], ["6", "22"], [["45"], ["15", "50"]]),
    }


@pytest.fixture
def site() -> Dict[str, FakeFrame]:
    return build_site()


@pytest.fixture
def fake_browser(site) -> FakeBrowser:
    return FakeBrowser(site)


@pytest.fixture
def fake_session(site) -> FakeSession:
    return FakeSession(site)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 16, 5, 0, tzinfo=timezone.utc))


@pytest.fixture
def registry(tmp_path) -> RouteRegistry:
    return RouteRegistry(tmp_path / "routes.json")


@pytest.fixture
def service(registry, fake_browser, clock) -> ScraperService:
    config = Settings()
    config.ratbv_base_url = BASE_URL
    config.timezone = "Europe/Bucharest"
    return ScraperService(
        registry=registry,
        cache=CacheService(ttl=300),
        session_factory=fake_browser.session,
        clock=clock,
        config=config,
    )


@pytest_asyncio.fixture
async def client(service) -> AsyncClient:
    app.dependency_overrides[get_scraper_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
