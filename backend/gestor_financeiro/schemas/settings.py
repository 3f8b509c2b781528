from pydantic import BaseModel
from typing import Optional, List


class AISettings(BaseModel):
    provider: str
    model: str


class SmsSettings(BaseModel):
    sender_number: Optional[str] = None


class SettingsUpdate(BaseModel):
    sender_number: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None


class AvailableProvider(BaseModel):
    id: str
    name: str
    requires_key: bool
    models: List[str]


class SettingsResponse(BaseModel):
    ai: AISettings
    sms: SmsSettings
    available_providers: List[AvailableProvider]


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    details: List[str] = []
    expenses_found: int = 0
