"""
Portfolio presenter.

Coordinates the timer driven quote refresh and user driven portfolio reloads,
and publishes the results through the status and table observables the view
is watching.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import logging
import threading
from typing import Callable, Optional, Tuple

from core.observer import EmptySignalObservable
from engine.portfolio_table import MissingQuoteError, build_portfolio_rows
from models import Event, EventType, Portfolio, PortfolioRow
from services import ServiceError
from utils.constants import TICK_INTERVAL_SECONDS
from utils.timefmt import fmt_clock

log = logging.getLogger(__name__)

MSG_UPDATING_QUOTES = "Updating quotes..."
MSG_RELOADING_PORTFOLIO = "Reloading portfolio..."
MSG_QUOTES_FAILED = "Failed to fetch quotes from server"
MSG_NO_PORTFOLIO = "No portfolio loaded"


class StatusState:
    """Current status line plus the observable announcing its changes."""

    def __init__(self, message: str = ""):
        self._lock = threading.Lock()
        self._message = message
        self.observable = EmptySignalObservable("status")

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def publish(self, message: str) -> None:
        with self._lock:
            self._message = message
        self.observable.notify()


class PortfolioTable:
    """Rows currently on display. Always replaced as a whole."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Tuple[PortfolioRow, ...] = ()
        self.observable = EmptySignalObservable("portfolio-table")

    @property
    def rows(self) -> Tuple[PortfolioRow, ...]:
        with self._lock:
            return self._rows

    def replace(self, rows: Tuple[PortfolioRow, ...]) -> None:
        with self._lock:
            self._rows = tuple(rows)
        self.observable.notify()


class PortfolioPresenter:
    """Presenter driving the portfolio view."""

    def __init__(
        self,
        view,
        quote_service,
        portfolio_service,
        shutdown: Optional[threading.Event] = None,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], str] = fmt_clock,
    ):
        self.view = view
        self.quote_service = quote_service
        self.portfolio_service = portfolio_service
        self.shutdown = shutdown if shutdown is not None else threading.Event()
        self.tick_interval = tick_interval
        self._clock = clock

        self.status = StatusState()
        self.table = PortfolioTable()
        self._portfolio: Optional[Portfolio] = None

        # Held for the whole of a refresh so timer and user triggers never interleave.
        self._refresh_lock = threading.Lock()
        self._quit_lock = threading.Lock()
        self._quit_called = False
        self._ticker: Optional[threading.Thread] = None
        self._events = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ui-events")

    @property
    def portfolio(self) -> Optional[Portfolio]:
        return self._portfolio

    def init(self) -> None:
        self.view.init(self)
        self._start_ticker()
        # startup reload runs on the event worker, not the caller (GUI) thread
        self.post_event(Event(EventType.PORTFOLIO_REFRESH))

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------
    def _start_ticker(self) -> None:
        if self._ticker is not None:
            return
        self._ticker = threading.Thread(target=self._tick_loop, name="quote-ticker", daemon=True)
        self._ticker.start()
        log.info("Quote refresh every %.1fs", self.tick_interval)

    def _tick_loop(self) -> None:
        while not self.shutdown.wait(self.tick_interval):
            try:
                self.refresh_quotes()
            except Exception:  # pragma: no cover - unexpected errors
                log.exception("Timer refresh failed")
        log.debug("Ticker stopped")

    def refresh_quotes(self) -> bool:
        """Timer path: refresh quotes for the portfolio already loaded."""
        with self._refresh_lock:
            if self._stopping():
                return False
            portfolio = self._portfolio
            if portfolio is None:
                self._set_status(MSG_NO_PORTFOLIO)
                return False
            self._set_status(MSG_UPDATING_QUOTES)
            return self._update_quotes(portfolio)

    def reload_portfolio(self) -> bool:
        """Full reload: fetch the portfolio, then its quotes."""
        with self._refresh_lock:
            if self._stopping():
                return False
            self._set_status(MSG_RELOADING_PORTFOLIO)
            try:
                portfolio = self.portfolio_service.fetch_portfolio()
            except ServiceError as e:
                log.warning("Portfolio reload failed: %s", e)
                self._set_status(f"Error reloading portfolio: {e}")
                return False
            if self._stopping():
                return False
            self._portfolio = portfolio
            return self._update_quotes(portfolio)

    def _update_quotes(self, portfolio: Portfolio) -> bool:
        try:
            quotes = self.quote_service.fetch_quotes(portfolio.asset_ids())
        except ServiceError as e:
            log.warning("Quote fetch failed: %s", e)
            self._set_status(MSG_QUOTES_FAILED)
            return False
        if self._stopping():
            return False

        try:
            rows = build_portfolio_rows(portfolio, quotes)
        except MissingQuoteError as e:
            log.warning("%s; keeping previous table", e)
            self._set_status(str(e))
            return False

        self.table.replace(rows)
        self._set_status(f"Last update: {self._clock()}")
        return True

    def _stopping(self) -> bool:
        if self.shutdown.is_set():
            log.debug("Skipping refresh: shutting down")
            return True
        return False

    def _set_status(self, message: str) -> None:
        log.debug("Status: %s", message)
        self.status.publish(message)

    # ------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------
    def post_event(self, event: Event) -> Optional[Future]:
        """Queue ``event`` for the single event worker; returns its future."""
        try:
            return self._events.submit(self.process_ui_event, event)
        except RuntimeError:
            log.debug("Dropping %s: presenter is shut down", event.type)
            return None

    def process_ui_event(self, event: Event) -> None:
        if event.type is EventType.PORTFOLIO_REFRESH:
            self.reload_portfolio()
        elif event.type is EventType.PROGRAM_QUIT:
            self.quit()
        else:
            log.warning("Unhandled UI event: %s", event)

    def quit(self) -> None:
        with self._quit_lock:
            if self._quit_called:
                return
            self._quit_called = True
        log.info("Shutting down presenter")
        self.view.quit()
        self.shutdown.set()
        self._events.shutdown(wait=False, cancel_futures=True)

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Wait for the ticker thread to stop. Returns True once it has."""
        ticker = self._ticker
        if ticker is None or ticker is threading.current_thread():
            return True
        ticker.join(timeout)
        return not ticker.is_alive()
