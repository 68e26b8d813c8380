"""Проверка ожидаемой суммы через Yandex GPT."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

import httpx

from core.config.settings import settings
from core.logging.logger import logger

from .base import AdjustmentError, AdjustmentRequest, AdjustmentResult, ExpectedAmountAdjuster

YANDEX_GPT_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"

SYSTEM_PROMPT = (
    "You are an expert financial analyst specializing in sales data for a water delivery business. "
    "Analyze the daily sales data and suggest adjustments to the expected cash received. "
    "Consider unusually high sales volume (based on liters sold), anomalies in the extra amounts, "
    "potential data entry errors, and any comments provided.\n"
    "Answer ONLY with a JSON object: "
    '{"adjustedExpectedAmount": <number>, "reasoning": "<text>"}. '
    "If the initial adjusted expected amount seems correct, return that same amount."
)

USER_PROMPT_TEMPLATE = (
    "Sales Date: {date}\n"
    "Rider Name: {rider_name}\n"
    "Vehicle Name: {vehicle_name}\n"
    "Liters Sold (Calculated): {liters_sold}\n"
    "Rate Per Liter: {rate_per_liter}\n"
    "Cash Received: {cash_received}\n"
    "Online Received: {online_received}\n"
    "Due Collected: {due_collected}\n"
    "Token Money: {token_money}\n"
    "Staff Expense: {staff_expense}\n"
    "Extra Amount: {extra_amount}\n"
    "Comment: {comment}\n"
    "\n"
    "Calculated Values by System:\n"
    "Total Sale (Liters Sold * Rate Per Liter): {total_sale}\n"
    "Actual Amount Received (Cash + Online): {actual_received}\n"
    "Initial Adjusted Expected Amount "
    "(Total Sale - Due Collected - Token Money - Staff Expense - Extra Amount): {initial_adjusted_expected}\n"
    "\n"
    "Review the Initial Adjusted Expected Amount and return your refined amount with a detailed reasoning."
)

# Модель иногда оборачивает JSON в ```json ... ```
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Достать JSON-объект из текста ответа модели."""
    cleaned = _FENCE_RE.sub("", text.strip())
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end < start:
        raise AdjustmentError("Model response does not contain a JSON object")
    try:
        data = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise AdjustmentError(f"Model response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AdjustmentError("Model response is not a JSON object")
    return data


class YandexGPTAdjuster(ExpectedAmountAdjuster):
    """Провайдер на Yandex GPT (completion API)."""

    name = "yandex_gpt"

    def __init__(
        self,
        folder_id: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.folder_id = folder_id or settings.yandex_gpt_folder_id
        self.api_key = api_key or settings.yandex_gpt_api_key
        self.model = model or settings.yandex_gpt_model
        self.temperature = settings.yandex_gpt_temperature if temperature is None else temperature
        self.timeout = timeout or settings.yandex_gpt_timeout_seconds
        self.transport = transport

    def build_payload(self, request: AdjustmentRequest) -> Dict[str, Any]:
        return {
            "modelUri": f"gpt://{self.folder_id}/{self.model}",
            "completionOptions": {
                "stream": False,
                "temperature": self.temperature,
                "maxTokens": "800",
            },
            "messages": [
                {"role": "system", "text": SYSTEM_PROMPT},
                {"role": "user", "text": USER_PROMPT_TEMPLATE.format(**request.as_prompt_values())},
            ],
        }

    async def adjust(self, request: AdjustmentRequest) -> AdjustmentResult:
        if not self.folder_id or not self.api_key:
            logger.warning("Yandex GPT is not configured (YANDEX_GPT_FOLDER_ID / YANDEX_GPT_API_KEY)")
            raise AdjustmentError("Yandex GPT is not configured")

        headers = {
            "Authorization": f"Api-Key {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(YANDEX_GPT_URL, json=self.build_payload(request), headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Yandex GPT HTTP error",
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            raise AdjustmentError(f"Yandex GPT HTTP error {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Yandex GPT transport error", error=str(e))
            raise AdjustmentError(f"Yandex GPT transport error: {e}") from e
        except ValueError as e:
            raise AdjustmentError("Yandex GPT returned a non-JSON body") from e

        try:
            text = data["result"]["alternatives"][0]["message"]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise AdjustmentError("Unexpected Yandex GPT response structure") from e

        parsed = extract_json_object(text)
        result = AdjustmentResult.parse(parsed.get("adjustedExpectedAmount"), parsed.get("reasoning"))
        logger.info(
            "Expected amount adjusted",
            provider=self.name,
            rider_name=request.rider_name,
            initial=str(request.totals.initial_adjusted_expected),
            adjusted=str(result.adjusted_expected_amount),
        )
        return result
