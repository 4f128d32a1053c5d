"""
OpenRouter (proxy-routed, multi-model) backend.

Same wire protocol as OpenAI; adds a model catalogue fetched once from
``/models`` for per-token pricing and supported-parameter checks.
"""

import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

import requests

from .base import CompletionResult
from .openai_raw import OpenAICompatibleProvider

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass
class ModelInfo:
    prompt_price: float          # USD per token
    completion_price: float      # USD per token
    supported_params: Set[str] = field(default_factory=set)


def fetch_openrouter_models(api_key: str, base_url: str = OPENROUTER_BASE_URL) -> Dict[str, ModelInfo]:
    """Download the OpenRouter model list and keep the entries with usable pricing."""
    resp = requests.get(
        f"{base_url}/models",
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=15,
    )
    resp.raise_for_status()

    models: Dict[str, ModelInfo] = {}
    for model in resp.json().get("data", []):
        pricing = model.get("pricing") or {}
        try:
            prompt = float(pricing["prompt"])
            completion = float(pricing["completion"])
        except (KeyError, TypeError, ValueError):
            continue
        models[model["id"]] = ModelInfo(
            prompt_price=prompt,
            completion_price=completion,
            supported_params=set(model.get("supported_parameters") or []),
        )
    return models


class ModelCatalog:
    """Lazily loaded model catalogue.

    The first caller performs the fetch; callers arriving while it is in
    flight wait on the same Future instead of issuing their own request.
    The fetch happens at most once per catalogue.
    """

    def __init__(self, fetch_fn: Callable[[], Dict[str, ModelInfo]]):
        self._fetch_fn = fetch_fn
        self._models: Dict[str, ModelInfo] = {}
        self._inflight: Optional[Future] = None
        self._lock = threading.Lock()

    def ensure_loaded(self) -> None:
        with self._lock:
            future = self._inflight
            owner = future is None
            if owner:
                future = self._inflight = Future()

        if not owner:
            future.result()
            return

        try:
            models = self._fetch_fn()
            self._models = models
            print(f"[LLM] Cached pricing for {len(models)} OpenRouter models")
        except Exception as exc:
            # Unknown pricing only disables cost estimates; completions still work
            print(f"[LLM] Failed to fetch OpenRouter model info: {exc}")
        finally:
            future.set_result(None)

    def get(self, model_id: str) -> Optional[ModelInfo]:
        return self._models.get(model_id)

    def __len__(self) -> int:
        return len(self._models)


class OpenRouterProvider(OpenAICompatibleProvider):
    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        model: str = "openai/gpt-4o-mini",
        base_url: Optional[str] = None,
        catalog: Optional[ModelCatalog] = None,
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url or OPENROUTER_BASE_URL)
        self.catalog = catalog or ModelCatalog(lambda: fetch_openrouter_models(api_key, self.base_url))

    def supports_param(self, model: str, param: str) -> bool:
        # Unknown model / no data: assume supported rather than strip params
        info = self.catalog.get(model)
        if info is None or not info.supported_params:
            return True
        return param in info.supported_params

    def estimate_cost(self, model: str, prompt_tokens: int, completion_tokens: int) -> Optional[float]:
        info = self.catalog.get(model)
        if info is None:
            return None
        return prompt_tokens * info.prompt_price + completion_tokens * info.completion_price

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        response_format: Optional[Dict[str, str]] = None,
    ) -> CompletionResult:
        self.catalog.ensure_loaded()
        return super().complete(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=response_format,
        )
