"""
Factory for the LLM backend.

The backend is chosen once, from configuration, when the agent is built; the
decision logic only ever sees the LLMProvider interface.
"""

from typing import Optional

from sentiment_agent import config

from .base import LLMProvider
from .gateway import CloudflareGatewayProvider
from .langchain_provider import LangChainProvider
from .openai_raw import OpenAICompatibleProvider, normalize_base_url
from .openrouter import OpenRouterProvider

PROVIDERS = ("langchain", "openai-raw", "openrouter", "cloudflare-gateway")


def create_llm_provider(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
) -> Optional[LLMProvider]:
    """
    Build the configured LLM backend.

    Parameters:
        provider: One of PROVIDERS (defaults to config.LLM_PROVIDER)
        api_key:  Upstream key (defaults to the key matching the provider)
        base_url: Override for OpenAI-compatible endpoints; blank is ignored
        model:    Default model id

    Returns:
        LLMProvider, or None when the required credentials are missing
        (research and analyst passes are then skipped)

    Raises:
        ValueError: unknown provider name
    """
    provider = (provider or config.LLM_PROVIDER).strip().lower()
    model = model or config.LLM_MODEL
    raw_base = config.OPENAI_BASE_URL if base_url is None else base_url
    cleaned_base = (raw_base or "").strip().rstrip("/") or None

    if provider == "langchain":
        key = api_key or config.OPENAI_API_KEY
        if not key:
            return None
        return LangChainProvider(api_key=key, model=model, base_url=cleaned_base)

    if provider == "openai-raw":
        key = api_key or config.OPENAI_API_KEY
        if not key:
            return None
        return OpenAICompatibleProvider(api_key=key, model=model, base_url=normalize_base_url(cleaned_base))

    if provider == "openrouter":
        key = api_key or config.OPENROUTER_API_KEY
        if not key:
            return None
        return OpenRouterProvider(api_key=key, model=model)

    if provider == "cloudflare-gateway":
        if not (config.CLOUDFLARE_AI_GATEWAY_ACCOUNT_ID and config.CLOUDFLARE_AI_GATEWAY_ID):
            return None
        return CloudflareGatewayProvider(
            account_id=config.CLOUDFLARE_AI_GATEWAY_ACCOUNT_ID,
            gateway_id=config.CLOUDFLARE_AI_GATEWAY_ID,
            gateway_token=config.CLOUDFLARE_AI_GATEWAY_TOKEN,
            api_key=api_key or config.OPENAI_API_KEY,
            model=model,
        )

    raise ValueError(f"Unknown LLM provider: {provider}. Available: {list(PROVIDERS)}")
