"""Direct OpenAI-compatible chat-completions client over plain HTTP."""

from typing import Any, Dict, List, Optional

import requests

from sentiment_agent.errors import ProviderError

from .base import CompletionResult, CompletionUsage, LLMProvider, call_with_backoff

DEFAULT_BASE_URL = "https://api.openai.com/v1"


def normalize_base_url(base_url: Optional[str], default: str = DEFAULT_BASE_URL) -> str:
    """Trim whitespace and trailing slashes; blank values fall back to *default*."""
    cleaned = (base_url or "").strip().rstrip("/")
    return cleaned or default


class OpenAICompatibleProvider(LLMProvider):
    """POSTs to ``{base_url}/chat/completions``.

    Works against api.openai.com and any endpoint speaking the same protocol.
    """

    name = "openai-raw"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = normalize_base_url(base_url)
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def supports_param(self, model: str, param: str) -> bool:
        return True

    def _build_body(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]],
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if response_format:
            if self.supports_param(model, "response_format"):
                body["response_format"] = response_format
            else:
                print(f"[LLM] Model {model} does not support response_format, relying on prompt instructions")
        return body

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = requests.post(
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(self.name, str(exc)) from exc
        if not resp.ok:
            raise ProviderError(self.name, resp.text[:500], status=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(self.name, f"invalid JSON body: {exc}", status=resp.status_code) from exc

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        response_format: Optional[Dict[str, str]] = None,
    ) -> CompletionResult:
        model_id = model or self.model
        body = self._build_body(messages, model_id, temperature, max_tokens, response_format)
        data = call_with_backoff(lambda: self._post(body), self.name)

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        prompt_tokens = int(usage.get("prompt_tokens") or 0)
        completion_tokens = int(usage.get("completion_tokens") or 0)

        reported = usage.get("cost")
        cost = float(reported) if reported and float(reported) > 0 else None
        if cost is None:
            cost = self.estimate_cost(model_id, prompt_tokens, completion_tokens)

        return CompletionResult(
            content=content,
            usage=CompletionUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=int(usage.get("total_tokens") or prompt_tokens + completion_tokens),
                cost=cost,
            ),
        )
