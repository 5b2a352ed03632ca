"""
CryptoCompare quote client.

Fetches the latest price and 24h change for a set of asset symbols.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

import requests

from datasources.http import get_shared_session
from models import Quote
from services import QuoteServiceError

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://min-api.cryptocompare.com"
DEFAULT_CURRENCY = "USD"


class CryptoCompareQuoteService:
    """Quote service backed by the CryptoCompare ``pricemultifull`` endpoint."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, session: Optional[requests.Session] = None):
        quotes_cfg = (config or {}).get("quotes", {})
        self.base_url = quotes_cfg.get("base_url", DEFAULT_BASE_URL).rstrip("/")
        self.currency = quotes_cfg.get("currency", DEFAULT_CURRENCY).upper()
        self.timeout = quotes_cfg.get("timeout_seconds", 10)
        self._session = session

    def fetch_quotes(self, asset_ids: Iterable[str]) -> Dict[str, Quote]:
        wanted = sorted(set(asset_ids))
        if not wanted:
            return {}

        sess = self._session or get_shared_session()
        url = f"{self.base_url}/data/pricemultifull"
        params = {"fsyms": ",".join(a.upper() for a in wanted), "tsyms": self.currency}
        try:
            r = sess.get(url, params=params, timeout=self.timeout)
            r.raise_for_status()
            payload = r.json()
        except (requests.RequestException, ValueError) as e:
            log.warning("Quote request failed (%s): %s", type(e).__name__, e)
            raise QuoteServiceError(f"quote request failed: {e}") from e

        if not isinstance(payload, dict):
            raise QuoteServiceError("unexpected quote payload")
        if payload.get("Response") == "Error":
            raise QuoteServiceError(payload.get("Message") or "quote server returned an error")

        raw = payload.get("RAW") or {}
        quotes: Dict[str, Quote] = {}
        for asset_id in wanted:
            data = (raw.get(asset_id.upper()) or {}).get(self.currency)
            if not data:
                log.warning("No %s quote returned for %s", self.currency, asset_id)
                continue
            try:
                quotes[asset_id] = Quote(
                    price=float(data["PRICE"]),
                    change=float(data.get("CHANGE24HOUR") or 0.0),
                    # server reports percent, Quote carries a fraction
                    percent_change=float(data.get("CHANGEPCT24HOUR") or 0.0) / 100.0,
                )
            except (KeyError, TypeError, ValueError) as e:
                raise QuoteServiceError(f"malformed quote for {asset_id}: {e}") from e

        log.debug("Fetched %d/%d quotes", len(quotes), len(wanted))
        return quotes
