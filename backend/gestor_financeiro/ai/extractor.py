"""
LLM-backed extraction of a candidate expense from a bank SMS.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gestor_financeiro.ai.client import AIClient, get_ai_client
from gestor_financeiro.ai.prompts import SMS_EXTRACTION_SYSTEM, SMS_EXTRACTION_USER
from gestor_financeiro.exceptions import ExtractionError
from gestor_financeiro.schemas.category import CategoryResponse, SubcategoryResponse

logger = logging.getLogger(__name__)

_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ExtractionResult(BaseModel):
    """Candidate expense as returned by the model, keyed by the store's field names."""

    model_config = ConfigDict(populate_by_name=True)

    establishment: Optional[str] = Field(None, alias="estabelecimento")
    amount: Decimal = Field(..., alias="valor", ge=0)
    time: str = Field("00:00", alias="hora")
    subcategory_id: str = Field(..., alias="id_subcategoria")
    card: Optional[str] = Field(None, alias="cartao")
    card_last_digits: Optional[int] = Field(None, alias="final_cartao")
    date: dt.date = Field(default_factory=dt.date.today, alias="data_competencia")

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        if isinstance(value, str):
            cleaned = value.replace("R$", "").strip()
            if "," in cleaned:
                cleaned = cleaned.replace(".", "").replace(",", ".")
            try:
                return Decimal(cleaned)
            except InvalidOperation:
                return value
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        if isinstance(value, dt.date):
            return value
        try:
            return dt.date.fromisoformat(str(value).strip()[:10])
        except (TypeError, ValueError):
            return dt.date.today()

    @field_validator("time", mode="before")
    @classmethod
    def parse_time(cls, value: Any) -> str:
        if isinstance(value, str) and _TIME.match(value.strip()):
            return value.strip()
        return "00:00"

    @field_validator("subcategory_id", mode="before")
    @classmethod
    def parse_subcategory_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("card_last_digits", mode="before")
    @classmethod
    def parse_card_last_digits(cls, value: Any) -> Optional[int]:
        digits = re.sub(r"[^0-9]", "", str(value)) if value is not None else ""
        return int(digits[-4:]) if digits else None


def parse_json_payload(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model response.

    Anything before the first '{' and after the last '}' is ignored, so
    markdown fences and chatty preambles are tolerated.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ExtractionError("No JSON object in model response")

    try:
        payload = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Invalid JSON in model response: {e}") from e

    if not isinstance(payload, dict):
        raise ExtractionError("Model response is not a JSON object")
    return payload


def format_subcategories(
    subcategories: Sequence[SubcategoryResponse],
    categories: Sequence[CategoryResponse]
) -> str:
    category_names = {c.id: c.name for c in categories}
    lines = []
    for sub in subcategories:
        category_name = sub.category_name or category_names.get(sub.category_id, "")
        lines.append(f"{sub.id} | {sub.name} | {category_name}")
    return "\n".join(lines)


class BaseExpenseExtractor(ABC):
    """Turns raw SMS text into a candidate expense. Vendor-agnostic."""

    @abstractmethod
    async def extract_expense(
        self,
        sms_text: str,
        subcategories: Sequence[SubcategoryResponse],
        categories: Sequence[CategoryResponse]
    ) -> ExtractionResult:
        """Raise ExtractionError when no usable candidate can be produced."""
        pass


class LLMExpenseExtractor(BaseExpenseExtractor):

    def __init__(self, client: Optional[AIClient] = None):
        self._client = client

    @property
    def client(self) -> AIClient:
        return self._client or get_ai_client()

    async def extract_expense(
        self,
        sms_text: str,
        subcategories: Sequence[SubcategoryResponse],
        categories: Sequence[CategoryResponse]
    ) -> ExtractionResult:
        system_prompt = SMS_EXTRACTION_SYSTEM.format(
            subcategories=format_subcategories(subcategories, categories),
            today=dt.date.today().isoformat()
        )
        user_prompt = SMS_EXTRACTION_USER.format(sms_text=sms_text)

        try:
            response = await self.client.complete(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                max_tokens=300,
                json_mode=True
            )
        except Exception as e:
            raise ExtractionError(f"LLM call failed: {e}") from e

        logger.debug(f"LLM response: {response}")
        payload = parse_json_payload(response)

        try:
            return ExtractionResult.model_validate(payload)
        except ValidationError as e:
            raise ExtractionError(f"Unusable extraction: {e}") from e
