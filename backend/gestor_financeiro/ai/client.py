import logging
import os
import litellm
from typing import Optional, Dict, Any

from gestor_financeiro.config import settings

logger = logging.getLogger(__name__)

litellm.drop_params = True

# Provider -> (litellm model prefix, settings attribute holding the key, env var litellm reads)
PROVIDERS: Dict[str, tuple] = {
    "gemini": ("gemini/", "gemini_api_key", "GEMINI_API_KEY"),
    "openai": ("", "openai_api_key", "OPENAI_API_KEY"),
    "openrouter": ("openrouter/", "openrouter_api_key", "OPENROUTER_API_KEY"),
    "anthropic": ("", "anthropic_api_key", "ANTHROPIC_API_KEY"),
    "ollama": ("ollama/", None, None),
}


class AIClient:

    def __init__(self, provider: Optional[str] = None, model: Optional[str] = None):
        self.provider = provider or settings.ai_provider
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unsupported AI provider: {self.provider}")
        self.model = self._get_model_string(model or settings.ai_model)
        self.api_base = self._get_api_base()

    def _get_model_string(self, model: str) -> str:
        prefix = PROVIDERS[self.provider][0]
        if prefix and not model.startswith(prefix):
            return f"{prefix}{model}"
        return model

    def _get_api_base(self) -> Optional[str]:
        if self.provider == "openrouter":
            return "https://openrouter.ai/api/v1"
        elif self.provider == "ollama":
            return settings.ai_base_url or "http://localhost:11434"
        return settings.ai_base_url

    def _api_key(self) -> Optional[str]:
        attr = PROVIDERS[self.provider][1]
        return getattr(settings, attr) if attr else None

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: int = 500,
        json_mode: bool = False,
        timeout: Optional[float] = None
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": settings.ai_temperature if temperature is None else temperature,
            "max_tokens": max_tokens,
            "timeout": timeout or settings.llm_timeout_seconds,
        }

        if self.api_base:
            kwargs["api_base"] = self.api_base

        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        env_var = PROVIDERS[self.provider][2]
        api_key = self._api_key()

        try:
            if env_var and api_key:
                os.environ[env_var] = api_key

            response = await litellm.acompletion(**kwargs)
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"AI completion error: {e}")
            raise
        finally:
            if env_var and api_key:
                os.environ.pop(env_var, None)


_ai_client: Optional[AIClient] = None


def get_ai_client() -> AIClient:
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client


def reset_ai_client() -> None:
    """Drop the cached client so the next call picks up changed settings."""
    global _ai_client
    _ai_client = None
