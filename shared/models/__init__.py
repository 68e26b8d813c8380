"""Shared models package."""

from .records import SalesEntryRecord, SalaryPaymentRecord

__all__ = [
    'SalesEntryRecord',
    'SalaryPaymentRecord',
]
