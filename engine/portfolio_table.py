"""
Portfolio table computation.

Turns a portfolio and a quote mapping into the rows shown by the view.
"""

from __future__ import annotations

from typing import Mapping, Tuple

from models import Portfolio, PortfolioRow, Quote
from utils.constants import FLOAT_FORMAT, TOTAL_ROW_LABEL


class MissingQuoteError(LookupError):
    """No quote was returned for an asset held in the portfolio."""

    def __init__(self, asset_id: str):
        super().__init__(asset_id)
        self.asset_id = asset_id

    def __str__(self) -> str:
        return f"Missing quote for {self.asset_id}"


def format_value(value: float) -> str:
    return FLOAT_FORMAT % value


def build_portfolio_rows(portfolio: Portfolio, quotes: Mapping[str, Quote]) -> Tuple[PortfolioRow, ...]:
    """Return one row per entry, in entry order, followed by the total row.

    Raises ``MissingQuoteError`` before producing anything if an entry has no
    quote, so callers never see a partial table.
    """
    rows = []
    total_value = 0.0
    for entry in portfolio.entries:
        quote = quotes.get(entry.asset_id)
        if quote is None:
            raise MissingQuoteError(entry.asset_id)
        value = entry.amount * quote.price
        rows.append(
            PortfolioRow(
                asset_name=entry.asset_id,
                asset_amount=format_value(entry.amount),
                asset_price=format_value(quote.price),
                asset_value=format_value(value),
                value_change=format_value(quote.change),
                percent_change=format_value(quote.percent_change * 100),
            )
        )
        total_value += value

    rows.append(PortfolioRow(asset_name=TOTAL_ROW_LABEL, asset_value=format_value(total_value)))
    return tuple(rows)
