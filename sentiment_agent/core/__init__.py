"""I/O layer: broker, market data, LLM, social feeds, caches and budgets."""
