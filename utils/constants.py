"""Shared constants for the Crypto Portfolio Tracker project."""

from __future__ import annotations

# Seconds between two timer driven quote refreshes
TICK_INTERVAL_SECONDS = 10.0

# Fixed point format for every number shown in the portfolio table
FLOAT_FORMAT = "%.4f"

TOTAL_ROW_LABEL = "Total Portfolio Value:"

__all__ = ["TICK_INTERVAL_SECONDS", "FLOAT_FORMAT", "TOTAL_ROW_LABEL"]
