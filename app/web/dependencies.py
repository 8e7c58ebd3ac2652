"""Service providers for the API routers (one instance per process)."""

from __future__ import annotations

from functools import lru_cache

from src.services.tax_history_service import TaxHistoryService
from src.services.transaction_service import TransactionService


@lru_cache(maxsize=1)
def get_transaction_service() -> TransactionService:
    return TransactionService.from_pg()


@lru_cache(maxsize=1)
def get_tax_history_service() -> TaxHistoryService:
    return TaxHistoryService.from_pg()
