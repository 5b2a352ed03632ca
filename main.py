#!/usr/bin/env python3
"""
Crypto Portfolio Tracker - Main Entry Point

A desktop application showing the live value of a crypto portfolio.
"""

import argparse
import sys
import threading
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from logging_config import get_logger

log = get_logger(__name__)

from PySide6.QtWidgets import QApplication

from datasources.http import close_shared_session
from engine.config import ConfigError, ConfigManager
from engine.presenter import PortfolioPresenter
from gui.main_window import PortfolioWindow
from services.portfolio import YamlPortfolioService
from services.quotes import CryptoCompareQuoteService
from utils.paths import init_app_paths


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Live value of a crypto portfolio")
    parser.add_argument("--config", help="path to config.yaml")
    parser.add_argument("--portfolio", help="path to portfolio.yaml (overrides config)")
    parser.add_argument("--interval", type=float, help="seconds between quote refreshes")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main application entry point."""
    args = parse_args(argv)
    app = QApplication(sys.argv[:1])
    app.setApplicationName("Crypto Portfolio Tracker")
    app.setApplicationVersion("1.0.0")

    try:
        init_app_paths()
        config_manager = ConfigManager(args.config)
        config = config_manager.load_config()
        if args.portfolio:
            config_manager.set('portfolio.path', args.portfolio)
        if args.interval:
            config_manager.set('refresh.interval_seconds', args.interval)
        for err in config_manager.validate_config():
            log.warning("Config: %s", err)
        get_logger(__name__, config_manager.get('logging.level'))

        log.info("Starting Crypto Portfolio Tracker")

        shutdown = threading.Event()
        window = PortfolioWindow(config)
        presenter = PortfolioPresenter(
            window,
            CryptoCompareQuoteService(config),
            YamlPortfolioService(config_manager.get_portfolio_path()),
            shutdown,
            tick_interval=config_manager.get_refresh_interval(),
        )
        window.show()
        presenter.init()
    except ConfigError as e:
        log.error("Failed to start application: %s", e)
        return 1

    code = app.exec()
    presenter.quit()
    presenter.wait_closed(timeout=2.0)
    close_shared_session()
    log.info("Exited with code %s", code)
    return code


if __name__ == "__main__":
    sys.exit(main())
