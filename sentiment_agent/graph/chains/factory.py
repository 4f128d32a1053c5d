"""
Factory for building structured LLM chains from configuration.

A chain is ChatPromptTemplate → LLMProvider.complete (JSON mode) → pydantic
validation. The provider is injected, so the same chains run on any backend.
"""

import json
import re
from typing import Any, Dict, List, Optional

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ValidationError

from sentiment_agent.core.llm import LLMProvider, estimate_cost
from sentiment_agent.errors import ResearchParseError
from sentiment_agent.state import AgentConfig, CostTracker

from .config import CHAIN_CONFIGS, ChainConfig

# LangChain message types → chat-completion roles
_ROLE_MAP = {"human": "user", "ai": "assistant", "system": "system"}
_FENCE_RE = re.compile(r"```(?:json)?\n?")


def strip_code_fences(content: str) -> str:
    return _FENCE_RE.sub("", content or "").strip()


def parse_structured(chain: str, content: str, model: type[BaseModel]) -> BaseModel:
    """Decode a JSON answer and validate it against *model*.

    Raises:
        ResearchParseError: not JSON, not an object, or fails validation
    """
    text = strip_code_fences(content)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResearchParseError(chain, f"invalid JSON: {exc}", raw=content) from exc
    if not isinstance(data, dict):
        raise ResearchParseError(chain, "expected a JSON object", raw=content)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ResearchParseError(chain, str(exc), raw=content) from exc


class StructuredChain:
    """One configured prompt bound to an LLM provider."""

    def __init__(self, config: ChainConfig, provider: LLMProvider):
        self.config = config
        self.provider = provider
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", config.system_prompt),
            ("human", config.human_prompt_template),
        ])

    @property
    def name(self) -> str:
        return self.config.name

    def model_for(self, settings: AgentConfig) -> str:
        """Model id for this chain's role: the analyst model or the research one."""
        if self.config.model_role == "analyst":
            return settings.llm_analyst_model
        return settings.llm_model

    def format_messages(self, inputs: Dict[str, Any]) -> List[Dict[str, str]]:
        missing = [v for v in self.config.input_variables if v not in inputs]
        if missing:
            raise KeyError(f"{self.config.name}: missing inputs {missing}")
        return [
            {"role": _ROLE_MAP.get(m.type, m.type), "content": m.content}
            for m in self.prompt.format_messages(**inputs)
        ]

    def invoke(
        self,
        inputs: Dict[str, Any],
        settings: AgentConfig,
        cost_tracker: Optional[CostTracker] = None,
    ) -> BaseModel:
        """Run the chain and return the validated structured output.

        Token usage is recorded on *cost_tracker* even when the answer fails
        to parse, since the call was still paid for.

        Raises:
            ProviderError: the completion failed (after retries)
            ResearchParseError: the answer didn't match the output model
        """
        model = self.model_for(settings)
        result = self.provider.complete(
            self.format_messages(inputs),
            model=model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            response_format={"type": "json_object"},
        )

        if cost_tracker is not None:
            usage = result.usage
            cost = usage.cost
            if cost is None:
                cost = estimate_cost(model, usage.prompt_tokens, usage.completion_tokens)
            cost_tracker.record(usage.prompt_tokens, usage.completion_tokens, cost)

        return parse_structured(self.config.name, result.content, self.config.structured_model)


class ChainFactory:
    """Factory for building chains from configuration."""

    @staticmethod
    def build_chain(config: ChainConfig, provider: LLMProvider) -> StructuredChain:
        return StructuredChain(config, provider)

    @staticmethod
    def build_all_chains(provider: LLMProvider) -> Dict[str, StructuredChain]:
        """
        Build all chains from the CHAIN_CONFIGS registry.

        Returns:
            Dict mapping chain name to StructuredChain
        """
        return {
            name: ChainFactory.build_chain(config, provider)
            for name, config in CHAIN_CONFIGS.items()
        }

    @staticmethod
    def build_chain_by_name(name: str, provider: LLMProvider) -> StructuredChain:
        """
        Raises:
            KeyError: If chain name not found in CHAIN_CONFIGS
        """
        if name not in CHAIN_CONFIGS:
            raise KeyError(f"Unknown chain: {name}. Available: {list(CHAIN_CONFIGS.keys())}")
        return ChainFactory.build_chain(CHAIN_CONFIGS[name], provider)
