"""Composite provider implementing fallback chain pattern."""

from typing import List, Optional

from .base import QuoteProvider
from .types import Quote


class CompositeQuoteProvider(QuoteProvider):
    """Chain of responsibility for quote providers with automatic fallback.

    Never raises: a symbol nobody can price yields None ("price unknown").
    """

    def __init__(self, providers: List[QuoteProvider]):
        """
        Parameters:
            providers: QuoteProvider instances, ordered by preference
        """
        self.providers = providers

    def get_quote(self, symbol: str) -> Optional[Quote]:
        errors = []

        for provider in self.providers:
            try:
                result = provider.get_quote(symbol)
                if result is not None:
                    return result
            except Exception as e:
                errors.append(f"{provider.get_name()} failed: {e}")

        if errors:
            print(f"[PROVIDER] No quote for {symbol}: {'; '.join(errors)}")
        return None

    def get_name(self) -> str:
        provider_names = ", ".join(p.get_name() for p in self.providers)
        return f"Composite[{provider_names}]"
