"""Pydantic schemas for inbound SMS batches."""

import enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SmsMessage(BaseModel):
    sender: Optional[str] = None
    body: str


class SmsBatch(BaseModel):
    """One device-level SMS-received notification."""
    messages: List[SmsMessage] = Field(..., min_length=1)


class SmsStatus(str, enum.Enum):
    persisted = "persisted"
    ignored_sender = "ignored_sender"
    no_taxonomy = "no_taxonomy"
    extraction_failed = "extraction_failed"
    unknown_subcategory = "unknown_subcategory"
    store_failed = "store_failed"
    failed = "failed"


class SmsOutcome(BaseModel):
    status: SmsStatus
    sender: Optional[str] = None
    expense_id: Optional[str] = None
    detail: Optional[str] = None


class SmsBatchAccepted(BaseModel):
    accepted: int


class SmsBatchResult(BaseModel):
    outcomes: List[SmsOutcome]
    persisted: int
