"""Application services."""

from .financial import FinancialService, get_financial_service, reset_financial_state

__all__ = [
    "FinancialService",
    "get_financial_service",
    "reset_financial_state",
]
