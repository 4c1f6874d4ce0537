"""Ledger queries package."""

from gold_ledger.queries.summary import NoDataError, require_history, summarize

__all__ = ["NoDataError", "require_history", "summarize"]
