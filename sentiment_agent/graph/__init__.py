"""Per-cycle decision pipeline: LLM chains, prompt context and the LangGraph cycle graph."""
