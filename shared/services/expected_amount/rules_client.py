"""Детерминированная проверка ожидаемой суммы по правилам."""

from __future__ import annotations

from decimal import Decimal
from typing import List

from core.logging.logger import logger
from shared.services.reconciliation_calculator import ZERO
from shared.services.report_aggregators import LOW_RATE_THRESHOLD

from .base import AdjustmentRequest, AdjustmentResult, ExpectedAmountAdjuster

# Доля extra_amount от итога продаж, выше которой сумма считается подозрительной
EXTRA_AMOUNT_SHARE_LIMIT = Decimal("0.10")


class RulesAdjuster(ExpectedAmountAdjuster):
    """Оставляет начальную ожидаемую сумму и перечисляет найденные аномалии."""

    name = "rules"

    def find_anomalies(self, request: AdjustmentRequest) -> List[str]:
        figures, totals = request.figures, request.totals
        notes = []

        if figures.rate_per_liter < LOW_RATE_THRESHOLD:
            notes.append(f"Rate per liter {figures.rate_per_liter} is below {LOW_RATE_THRESHOLD}.")
        if totals.total_sale > ZERO and figures.extra_amount > totals.total_sale * EXTRA_AMOUNT_SHARE_LIMIT:
            notes.append(
                f"Extra amount {figures.extra_amount} exceeds 10% of total sale {totals.total_sale}."
            )
        if totals.total_sale == ZERO and totals.actual_received > ZERO:
            notes.append("No sale recorded but money was collected; check meter readings.")
        if request.comment and request.comment.strip():
            notes.append(f"Comment provided: {request.comment.strip()}")
        return notes

    async def adjust(self, request: AdjustmentRequest) -> AdjustmentResult:
        notes = self.find_anomalies(request)
        if notes:
            reasoning = "Initial expected amount kept. Review: " + " ".join(notes)
        else:
            reasoning = "No anomalies detected; initial expected amount is consistent with the entered data."

        logger.debug(
            "Rules adjuster reviewed entry",
            rider_name=request.rider_name,
            anomalies=len(notes),
        )
        return AdjustmentResult(
            adjusted_expected_amount=request.totals.initial_adjusted_expected,
            reasoning=reasoning,
        )
