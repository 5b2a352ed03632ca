from pathlib import Path

from platformdirs import user_data_dir, user_log_dir

APP_NAME = "CryptoPortfolioTracker"
APP_VENDOR = "CryptoPortfolioTracker"

DATA_DIR = Path(user_data_dir(APP_NAME, APP_VENDOR))
LOG_DIR = Path(user_log_dir(APP_NAME, APP_VENDOR))
CONFIG_PATH = DATA_DIR / "config.yaml"
PORTFOLIO_PATH = DATA_DIR / "portfolio.yaml"


def init_app_paths() -> None:
    for _p in (DATA_DIR, LOG_DIR):
        _p.mkdir(parents=True, exist_ok=True)

    legacy_config = Path("config.yaml")
    if not CONFIG_PATH.exists() and legacy_config.exists():
        CONFIG_PATH.write_bytes(legacy_config.read_bytes())

    legacy_portfolio = Path("portfolio.yaml")
    if not PORTFOLIO_PATH.exists() and legacy_portfolio.exists():
        PORTFOLIO_PATH.write_bytes(legacy_portfolio.read_bytes())
