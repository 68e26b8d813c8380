"""Проверка ожидаемой суммы дневного отчета."""

from .base import AdjustmentError, AdjustmentRequest, AdjustmentResult, ExpectedAmountAdjuster
from .factory import get_expected_amount_adjuster

__all__ = [
    "AdjustmentError",
    "AdjustmentRequest",
    "AdjustmentResult",
    "ExpectedAmountAdjuster",
    "get_expected_amount_adjuster",
]
