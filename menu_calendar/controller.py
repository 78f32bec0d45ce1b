"""
Meal menu controller
Runs query -> fetch -> parse -> render for a selected date and drives the display state
"""

import threading
import traceback
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Union

import requests

from common.http_client import fetch_text
from menu_calendar.errors import DateValidationError, MealFetchError, MealMenuError
from menu_calendar.meal_parser import parse_meal_response
from menu_calendar.query import PROXY_BASE, build_meal_query
from menu_calendar.renderer import DisplayPort, MenuView, build_menu_view


STATUS_OK = 'ok'
STATUS_NO_DATA = 'no_data'
STATUS_ERROR = 'error'
STATUS_STALE = 'stale'


@dataclass
class SearchOutcome:
    """What happened to one query"""
    status: str
    sequence: int
    view: Optional[MenuView] = None
    error: Optional[Exception] = None


class MealMenuController:
    """
    Looks up one day's menu and shows it on a display

    Every query gets a sequence number. A query that settles after a newer
    one was issued is dropped without touching the display, so only the
    most recent query's result is ever shown. Late requests are left to
    finish rather than cancelled.
    """

    def __init__(self, display: DisplayPort,
                 fetch: Optional[Callable[..., str]] = None,
                 proxy_base: str = PROXY_BASE,
                 timeout: Optional[float] = None,
                 max_workers: int = 4):
        self.display = display
        self.fetch = fetch or fetch_text
        self.proxy_base = proxy_base
        self.timeout = timeout
        self.max_workers = max_workers
        self._sequence = 0
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    def _fetch(self, url: str) -> str:
        try:
            return self.fetch(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise MealFetchError(f"Failed to fetch meal data: {e}")

    def search(self, value: Union[str, date, None]) -> Optional[SearchOutcome]:
        """
        Look up and display the menu for a date

        Args:
            value: 'YYYY-MM-DD' string or date from the date picker

        Returns:
            SearchOutcome, or None if no valid date was selected
        """
        try:
            query = build_meal_query(value, self.proxy_base)
        except DateValidationError as e:
            self.display.alert(str(e))
            return None

        with self._lock:
            self._sequence += 1
            sequence = self._sequence
            self.display.clear()
            self.display.show_loading()

        try:
            xml_text = self._fetch(query['proxy_url'])
            entries = parse_meal_response(xml_text)
            view = build_menu_view(entries, query['date'])
        except MealMenuError as e:
            print(f"Error fetching meal data for {query['date'].iso}: {e}")
            return self._settle_error(sequence, e)
        except Exception as e:
            print(f"Unexpected error fetching meal data for {query['date'].iso}: {e}")
            traceback.print_exc()
            return self._settle_error(sequence, e)

        with self._lock:
            if sequence != self._sequence:
                return SearchOutcome(STATUS_STALE, sequence, view=view)
            self.display.show(view)

        status = STATUS_OK if view.has_data else STATUS_NO_DATA
        return SearchOutcome(status, sequence, view=view)

    def _settle_error(self, sequence: int, error: Exception) -> SearchOutcome:
        with self._lock:
            if sequence != self._sequence:
                return SearchOutcome(STATUS_STALE, sequence, error=error)
            self.display.show_error()
        return SearchOutcome(STATUS_ERROR, sequence, error=error)

    def submit(self, value: Union[str, date, None]) -> Future:
        """Run search() on a worker thread"""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers)
        return self._executor.submit(self.search, value)

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
