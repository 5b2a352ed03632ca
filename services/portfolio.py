"""Read-only portfolio loaded from a YAML file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from models import Portfolio, PortfolioEntry
from services import PortfolioServiceError
from utils.paths import PORTFOLIO_PATH

log = logging.getLogger(__name__)


class YamlPortfolioService:
    """
    Portfolio service reading a file shaped like::

        entries:
          - asset: BTC
            amount: 2.0
          - asset: ETH
            amount: 3.0

    The file is read on every fetch so edits show up on the next reload.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else PORTFOLIO_PATH

    def fetch_portfolio(self) -> Portfolio:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise PortfolioServiceError(f"portfolio file not found: {self.path}") from e
        except OSError as e:
            raise PortfolioServiceError(f"cannot read {self.path}: {e}") from e
        except yaml.YAMLError as e:
            raise PortfolioServiceError(f"invalid YAML in {self.path}: {e}") from e

        portfolio = Portfolio(entries=tuple(self._parse_entries(data)))
        log.info("Loaded portfolio from %s: %d entries", self.path, len(portfolio.entries))
        return portfolio

    def _parse_entries(self, data: Any) -> List[PortfolioEntry]:
        if data is None:
            return []
        if not isinstance(data, dict) or not isinstance(data.get("entries", []), list):
            raise PortfolioServiceError("portfolio must be a mapping with an 'entries' list")

        entries: List[PortfolioEntry] = []
        for idx, raw in enumerate(data.get("entries") or []):
            entries.append(self._parse_entry(idx, raw))
        return entries

    @staticmethod
    def _parse_entry(idx: int, raw: Dict[str, Any]) -> PortfolioEntry:
        if not isinstance(raw, dict):
            raise PortfolioServiceError(f"entry {idx} is not a mapping")
        asset = str(raw.get("asset") or "").strip().upper()
        if not asset:
            raise PortfolioServiceError(f"entry {idx} has no asset")
        try:
            amount = float(raw.get("amount", 0))
        except (TypeError, ValueError) as e:
            raise PortfolioServiceError(f"entry {idx} ({asset}) has invalid amount") from e
        return PortfolioEntry(asset_id=asset, amount=amount)
