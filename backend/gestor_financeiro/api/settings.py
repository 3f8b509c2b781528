from fastapi import APIRouter, Depends, HTTPException
from gestor_financeiro.ai.client import PROVIDERS, get_ai_client, reset_ai_client
from gestor_financeiro.config import settings
from gestor_financeiro.dependencies import get_gateway, get_settings_store
from gestor_financeiro.exceptions import GestorError
from gestor_financeiro.api.errors import to_http_exception
from gestor_financeiro.schemas.settings import (
    AISettings,
    AvailableProvider,
    ConnectionTestResult,
    SettingsResponse,
    SettingsUpdate,
    SmsSettings,
)
from gestor_financeiro.services.gateway import ExpenseGateway
from gestor_financeiro.services.settings_service import (
    SettingsStore,
    get_sender_number,
    set_sender_number,
)

router = APIRouter(prefix="/settings", tags=["settings"])

AVAILABLE_PROVIDERS = [
    AvailableProvider(
        id="gemini",
        name="Google Gemini",
        requires_key=True,
        models=[
            "gemini-1.5-flash",
            "gemini-1.5-pro",
            "gemini-2.0-flash",
        ]
    ),
    AvailableProvider(
        id="openai",
        name="OpenAI",
        requires_key=True,
        models=[
            "gpt-4o-mini",
            "gpt-4o",
        ]
    ),
    AvailableProvider(
        id="openrouter",
        name="OpenRouter",
        requires_key=True,
        models=[
            "google/gemini-flash-1.5",
            "openai/gpt-4o-mini",
            "anthropic/claude-3-haiku",
        ]
    ),
    AvailableProvider(
        id="anthropic",
        name="Anthropic",
        requires_key=True,
        models=[
            "claude-3-haiku-20240307",
        ]
    ),
    AvailableProvider(
        id="ollama",
        name="Ollama (Local)",
        requires_key=False,
        models=[
            "llama3.1:8b",
            "mistral:7b",
        ]
    ),
]


def _settings_response(store: SettingsStore) -> SettingsResponse:
    try:
        sender_number = get_sender_number(store)
    except GestorError as e:
        raise to_http_exception(e) from e
    return SettingsResponse(
        ai=AISettings(provider=settings.ai_provider, model=settings.ai_model),
        sms=SmsSettings(sender_number=sender_number),
        available_providers=AVAILABLE_PROVIDERS
    )


@router.get("", response_model=SettingsResponse)
def get_settings(store: SettingsStore = Depends(get_settings_store)):
    return _settings_response(store)


@router.patch("", response_model=SettingsResponse)
def update_settings(
    update: SettingsUpdate,
    store: SettingsStore = Depends(get_settings_store)
):
    """Update the SMS sender allow-list and/or the AI provider."""
    if update.provider is not None and update.provider not in PROVIDERS:
        raise HTTPException(status_code=422, detail=f"Unknown provider: {update.provider}")

    if "sender_number" in update.model_fields_set:
        try:
            set_sender_number(store, update.sender_number)
        except GestorError as e:
            raise to_http_exception(e) from e

    if update.provider is not None:
        settings.ai_provider = update.provider
    if update.model is not None:
        settings.ai_model = update.model
    if update.provider is not None or update.model is not None:
        reset_ai_client()

    return _settings_response(store)


@router.post("/ai/test")
async def test_ai_connection():
    try:
        client = get_ai_client()
        response = await client.complete(
            system_prompt="You are a helpful assistant.",
            user_prompt="Say 'OK' if you can hear me.",
            max_tokens=10
        )
        return {"status": "ok", "response": response.strip()}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"AI connection failed: {str(e)}")


@router.get("/connection-test", response_model=ConnectionTestResult)
def test_store_connection(gateway: ExpenseGateway = Depends(get_gateway)):
    """Diagnose access to the expense store."""
    return gateway.test_connection()
