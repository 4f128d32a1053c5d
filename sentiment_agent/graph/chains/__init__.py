from .config import CHAIN_CONFIGS, ChainConfig
from .factory import ChainFactory, StructuredChain, parse_structured, strip_code_fences
from .models import AnalystRecommendation, AnalystReport, PositionReview, ResearchVerdict

__all__ = [
    "CHAIN_CONFIGS",
    "ChainConfig",
    "ChainFactory",
    "StructuredChain",
    "parse_structured",
    "strip_code_fences",
    "AnalystRecommendation",
    "AnalystReport",
    "PositionReview",
    "ResearchVerdict",
]
