"""
Domain models for Crypto Portfolio Tracker.

Plain data carried between the services, the presenter and the view.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class PortfolioEntry:
    """Amount held of one asset."""
    asset_id: str
    amount: float


@dataclass(frozen=True)
class Portfolio:
    """Ordered collection of portfolio entries."""
    entries: Tuple[PortfolioEntry, ...] = ()

    def asset_ids(self) -> FrozenSet[str]:
        return frozenset(entry.asset_id for entry in self.entries)


@dataclass(frozen=True)
class Quote:
    """Latest market quote for an asset.

    ``percent_change`` is a fraction: 0.01 means +1%.
    """
    price: float
    change: float
    percent_change: float


@dataclass(frozen=True)
class PortfolioRow:
    """One rendered line of the portfolio table."""
    asset_name: str
    asset_amount: str = ""
    asset_price: str = ""
    asset_value: str = ""
    value_change: str = ""
    percent_change: str = ""

    def cells(self) -> Tuple[str, ...]:
        return (
            self.asset_name,
            self.asset_amount,
            self.asset_price,
            self.asset_value,
            self.value_change,
            self.percent_change,
        )


class EventType(Enum):
    """UI events understood by the presenter."""
    PORTFOLIO_REFRESH = "portfolio_refresh"
    PROGRAM_QUIT = "program_quit"


@dataclass(frozen=True)
class Event:
    type: EventType
