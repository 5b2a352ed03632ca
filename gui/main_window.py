"""
Main window for Crypto Portfolio Tracker.

Renders the portfolio table and status line owned by the presenter and
forwards user actions back to it.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from PySide6.QtWidgets import (
    QLabel, QMainWindow, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QFont, QKeySequence

from core.observer import EmptySignalObservable, EmptySignalObserver, Subscription
from core.signals import ViewSignals
from models import Event, EventType
from utils.constants import TOTAL_ROW_LABEL

COLUMNS = ["Asset", "Amount", "Price", "Value", "Change", "Change %"]


class PortfolioWindow(QMainWindow):
    """Main application window."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, observer: Optional[EmptySignalObserver] = None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.config = config or {}
        self.presenter = None
        self.observer = observer or EmptySignalObserver()
        self.signals = ViewSignals()
        self._subscriptions: List[Tuple[EmptySignalObservable, Subscription]] = []
        self._closing = False

        self.init_ui()
        self.init_actions()
        self.init_status_bar()

        self.signals.status_changed.connect(self.render_status)
        self.signals.table_changed.connect(self.render_table)
        self.signals.quit_requested.connect(self.close)

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------
    def init_ui(self):
        """Initialize the user interface."""
        app_cfg = self.config.get('app', {})
        ui_cfg = self.config.get('ui', {})
        self.setWindowTitle(app_cfg.get('name', "Crypto Portfolio Tracker"))
        self.resize(ui_cfg.get('window_width', 800), ui_cfg.get('window_height', 400))

        central = QWidget()
        layout = QVBoxLayout(central)

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionMode(QTableWidget.NoSelection)
        layout.addWidget(self.table)

        self.setCentralWidget(central)

    def init_actions(self):
        """Refresh and quit, bound to R and Q like the terminal version."""
        toolbar = self.addToolBar('Main')
        toolbar.setMovable(False)

        self.refresh_action = QAction('Refresh', self)
        self.refresh_action.setShortcut(QKeySequence('R'))
        self.refresh_action.setToolTip('Reload portfolio and quotes (R)')
        self.refresh_action.triggered.connect(self.request_refresh)
        toolbar.addAction(self.refresh_action)

        self.quit_action = QAction('Quit', self)
        self.quit_action.setShortcut(QKeySequence('Q'))
        self.quit_action.setToolTip('Quit (Q)')
        self.quit_action.triggered.connect(self.request_quit)
        toolbar.addAction(self.quit_action)

    def init_status_bar(self):
        self.status_label = QLabel("Starting...")
        self.statusBar().addWidget(self.status_label)

    # ------------------------------------------------------------------
    # View contract used by the presenter
    # ------------------------------------------------------------------
    def init(self, presenter) -> None:
        """Attach to ``presenter`` and start watching its observables."""
        self.presenter = presenter
        status_obs = presenter.status.observable
        table_obs = presenter.table.observable
        self._subscriptions = [
            (status_obs, self.observer.watch(status_obs, self.signals.status_changed.emit)),
            (table_obs, self.observer.watch(table_obs, self.signals.table_changed.emit)),
        ]
        self.logger.info("View attached to presenter")

    def quit(self) -> None:
        """Close the window; safe to call from any thread."""
        if self._closing:
            return
        self.signals.quit_requested.emit()

    # ------------------------------------------------------------------
    # Rendering (GUI thread)
    # ------------------------------------------------------------------
    def render_status(self) -> None:
        if self.presenter is None:
            return
        self.status_label.setText(self.presenter.status.message)

    def render_table(self) -> None:
        if self.presenter is None:
            return
        rows = self.presenter.table.rows
        self.table.clearContents()
        self.table.setRowCount(len(rows))
        bold = QFont()
        bold.setBold(True)
        for row_index, row in enumerate(rows):
            is_total = row.asset_name == TOTAL_ROW_LABEL
            for col, text in enumerate(row.cells()):
                item = QTableWidgetItem(text)
                if col > 0:
                    item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
                if is_total:
                    item.setFont(bold)
                self.table.setItem(row_index, col, item)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    def request_refresh(self) -> None:
        if self.presenter is not None:
            self.presenter.post_event(Event(EventType.PORTFOLIO_REFRESH))

    def request_quit(self) -> None:
        if self.presenter is not None:
            self.presenter.post_event(Event(EventType.PROGRAM_QUIT))
        else:
            self.close()

    def detach(self) -> None:
        """Stop watching the presenter's observables."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for observable, subscription in subscriptions:
            self.observer.ignore(observable, subscription)

    def closeEvent(self, event):
        """Handle window close event."""
        if self._closing:
            event.accept()
            return
        self._closing = True
        self.detach()
        if self.presenter is not None:
            self.presenter.quit()
        self.logger.info("Application closing")
        event.accept()
