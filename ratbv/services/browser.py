"""Headless Chromium sessions for the frame-based RATBV pages.

The timetable site serves a frameset whose real content lives in nested
documents, so the session keeps track of the document context it is
currently "inside" and exposes a small selenium-like surface on top of
Playwright: navigate, enter a child frame by index, look elements up and
read their text or attributes.

Every Playwright error is translated into :class:`ScrapeFailure` and the
browser process is always closed when the session scope exits.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..config import Settings, settings as default_settings
from .errors import ElementNotFound, ScrapeFailure

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


def by_id(value: str) -> str:
    # Attribute form so that every element reusing the id is matched.
    return f'[id="{value}"]'


def by_class(*names: str) -> str:
    return ", ".join(f".{name}" for name in names)


def by_tag(name: str) -> str:
    return name


class BrowserSession:
    """Selenium-style navigation on top of a Playwright page."""

    def __init__(self, page, element_wait: float = 5.0, navigation_timeout: float = 30.0) -> None:
        self.page = page
        self.element_wait = element_wait
        self.navigation_timeout = navigation_timeout
        self._frame = page.main_frame

    @property
    def current_url(self) -> str:
        """URL of the document context currently in use."""
        return self._frame.url

    def navigate(self, url: str) -> None:
        logger.debug("Navigating to %s", url)
        try:
            self.page.goto(url, wait_until="load", timeout=self.navigation_timeout * 1000)
        except PlaywrightTimeoutError as exc:
            raise ScrapeFailure(f"Timed out loading {url}") from exc
        except PlaywrightError as exc:
            raise ScrapeFailure(f"Failed to load {url}: {exc}") from exc
        self._frame = self.page.main_frame

    def switch_to_frame(self, index: Optional[int] = None) -> None:
        """Enter the child frame at ``index``; ``None`` returns to the top document."""
        if index is None:
            self._frame = self.page.main_frame
            return
        children = self._frame.child_frames
        if index < 0 or index >= len(children):
            raise ScrapeFailure(
                f"Frame index {index} out of range in {self._frame.url or 'document'} "
                f"({len(children)} frames)"
            )
        self._frame = children[index]
        try:
            self._frame.wait_for_load_state("load", timeout=self.navigation_timeout * 1000)
        except PlaywrightError as exc:
            raise ScrapeFailure(f"Frame {index} did not finish loading: {exc}") from exc

    def find_element(self, selector: str, within=None):
        """Return the first match, waiting up to ``element_wait`` seconds."""
        scope = within if within is not None else self._frame
        try:
            handle = scope.wait_for_selector(
                selector,
                state="attached",
                timeout=self.element_wait * 1000,
            )
        except PlaywrightTimeoutError as exc:
            raise ElementNotFound(f"No element matches {selector!r}") from exc
        except PlaywrightError as exc:
            raise ScrapeFailure(f"Lookup of {selector!r} failed: {exc}") from exc
        if handle is None:
            raise ElementNotFound(f"No element matches {selector!r}")
        return handle

    def find_elements(self, selector: str, within=None) -> List:
        """Return all matches in document order; empty when nothing matches."""
        scope = within if within is not None else self._frame
        try:
            return list(scope.query_selector_all(selector))
        except PlaywrightError as exc:
            raise ScrapeFailure(f"Lookup of {selector!r} failed: {exc}") from exc

    def get_text(self, element) -> str:
        try:
            return element.inner_text() or ""
        except PlaywrightError as exc:
            raise ScrapeFailure(f"Could not read element text: {exc}") from exc

    def get_attribute(self, element, name: str) -> Optional[str]:
        try:
            return element.get_attribute(name)
        except PlaywrightError as exc:
            raise ScrapeFailure(f"Could not read attribute {name!r}: {exc}") from exc


@contextlib.contextmanager
def open_browser_session(config: Optional[Settings] = None) -> Iterator[BrowserSession]:
    """Launch headless Chromium and yield a session; the browser always closes."""
    config = config or default_settings
    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(
                headless=True,
                executable_path=config.executable_path,
                args=CHROMIUM_ARGS,
            )
            try:
                context = browser.new_context(locale="ro-RO")
                page = context.new_page()
                page.set_default_navigation_timeout(config.navigation_timeout_seconds * 1000)
                yield BrowserSession(
                    page,
                    element_wait=config.element_wait_seconds,
                    navigation_timeout=config.navigation_timeout_seconds,
                )
            finally:
                browser.close()
                logger.debug("Browser closed")
    except PlaywrightError as exc:
        raise ScrapeFailure(f"Browser session failed: {exc}") from exc


__all__ = [
    "BrowserSession",
    "CHROMIUM_ARGS",
    "by_class",
    "by_id",
    "by_tag",
    "open_browser_session",
]
