"""Tests for the Playwright session wrapper (no real browser is started)."""

from unittest.mock import MagicMock, Mock

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ratbv.config import Settings
from ratbv.services import browser as browser_module
from ratbv.services.browser import BrowserSession, by_class, by_id, open_browser_session
from ratbv.services.errors import ElementNotFound, ScrapeFailure


def _page(child_count: int = 3) -> Mock:
    page = Mock()
    page.main_frame.url = "https://www.ratbv.ro/afisaje/23b-dus.html"
    page.main_frame.child_frames = [Mock(url=f"frame-{index}") for index in range(child_count)]
    return page


@pytest.fixture
def fake_playwright(monkeypatch):
    playwright = MagicMock()
    manager = MagicMock()
    manager.__enter__.return_value = playwright
    manager.__exit__.return_value = False
    monkeypatch.setattr(browser_module, "sync_playwright", lambda: manager)
    return playwright


def test_selectors():
    assert by_id("web_min") == '[id="web_min"]'
    assert by_class("list_statie", "list_sus_active") == ".list_statie, .list_sus_active"


def test_switch_to_frame_and_back():
    page = _page()
    session = BrowserSession(page)

    session.switch_to_frame(2)
    assert session.current_url == "frame-2"

    session.switch_to_frame(None)
    assert session.current_url == page.main_frame.url


def test_switch_to_missing_frame_fails():
    session = BrowserSession(_page(child_count=1))

    with pytest.raises(ScrapeFailure):
        session.switch_to_frame(2)


def test_find_element_timeout_is_element_not_found():
    page = _page()
    page.main_frame.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded")
    session = BrowserSession(page, element_wait=5)

    with pytest.raises(ElementNotFound):
        session.find_element(by_id("tabel2"))
    _, kwargs = page.main_frame.wait_for_selector.call_args
    assert kwargs["timeout"] == 5000


def test_find_element_within_element():
    page = _page()
    parent = Mock()
    session = BrowserSession(page)

    assert session.find_element("b", within=parent) is parent.wait_for_selector.return_value
    page.main_frame.wait_for_selector.assert_not_called()


def test_find_elements_empty():
    page = _page()
    page.main_frame.query_selector_all.return_value = []
    session = BrowserSession(page)

    assert session.find_elements(by_id("web_class_hours")) == []


def test_navigation_timeout_is_scrape_failure():
    page = _page()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
    session = BrowserSession(page)

    with pytest.raises(ScrapeFailure, match="Timed out"):
        session.navigate("https://www.ratbv.ro/afisaje/23b-dus.html")


def test_session_launches_headless_without_sandbox(fake_playwright):
    config = Settings()
    config.browser_executable_path = "/usr/bin/chromium"

    with open_browser_session(config) as session:
        assert isinstance(session, BrowserSession)

    _, kwargs = fake_playwright.chromium.launch.call_args
    assert kwargs["headless"] is True
    assert kwargs["executable_path"] == "/usr/bin/chromium"
    assert "--no-sandbox" in kwargs["args"]
    fake_playwright.chromium.launch.return_value.close.assert_called_once()


def test_session_closes_browser_when_scrape_fails(fake_playwright):
    browser = fake_playwright.chromium.launch.return_value

    with pytest.raises(ElementNotFound):
        with open_browser_session(Settings()):
            raise ElementNotFound("No element matches '[id=\"tabel2\"]'")

    browser.close.assert_called_once()


def test_launch_failure_is_scrape_failure(fake_playwright):
    fake_playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

    with pytest.raises(ScrapeFailure, match="Executable doesn't exist"):
        with open_browser_session(Settings()):
            pass
