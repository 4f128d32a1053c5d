"""LangChain ChatOpenAI backend (the default)."""

from typing import Any, Dict, List, Optional

import openai
from langchain_openai import ChatOpenAI

from sentiment_agent.errors import ProviderError

from .base import CompletionResult, CompletionUsage, LLMProvider, call_with_backoff
from .pricing import estimate_cost


class LangChainProvider(LLMProvider):
    """Completions through ``langchain_openai.ChatOpenAI``.

    The client's own retries are disabled so the shared backoff policy is
    the only one in play.
    """

    name = "langchain"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", base_url: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url

    def _build_llm(self, model: str, temperature: float, max_tokens: int) -> ChatOpenAI:
        kwargs: Dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "api_key": self.api_key,
            "max_retries": 0,
        }
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return ChatOpenAI(**kwargs)

    def _invoke(self, llm: ChatOpenAI, messages: List[Dict[str, str]], response_format: Optional[Dict[str, str]]):
        try:
            if response_format:
                return llm.invoke(messages, response_format=response_format)
            return llm.invoke(messages)
        except openai.APIStatusError as exc:
            raise ProviderError(self.name, exc.message, status=exc.status_code) from exc
        except openai.APIError as exc:
            raise ProviderError(self.name, str(exc)) from exc

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        response_format: Optional[Dict[str, str]] = None,
    ) -> CompletionResult:
        model_id = model or self.model
        llm = self._build_llm(model_id, temperature, max_tokens)
        message = call_with_backoff(lambda: self._invoke(llm, messages, response_format), self.name)

        content = message.content if isinstance(message.content, str) else str(message.content)
        usage = getattr(message, "usage_metadata", None) or {}
        tokens_in = int(usage.get("input_tokens", 0))
        tokens_out = int(usage.get("output_tokens", 0))

        return CompletionResult(
            content=content,
            usage=CompletionUsage(
                prompt_tokens=tokens_in,
                completion_tokens=tokens_out,
                total_tokens=int(usage.get("total_tokens", tokens_in + tokens_out)),
                cost=estimate_cost(model_id, tokens_in, tokens_out),
            ),
        )
