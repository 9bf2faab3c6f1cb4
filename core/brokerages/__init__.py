"""Brokerage handles produced by setup."""

from .base import IBrokerage, BacktestingBrokerage, PaperBrokerage

__all__ = ["IBrokerage", "BacktestingBrokerage", "PaperBrokerage"]
