"""Priority classification, scoring and AI-backed analysis."""

from .analyzer import LLMThreadAnalyzer
from .batch import BatchScorer, ThreadScoreOutcome
from .cache import AnalysisCache
from .classifier import HeuristicClassifier, classify, classify_with_reason
from .llm import LLMClient, LLMError, OllamaClient
from .priority import (
    normalize_messages,
    priority_bucket,
    score_messages,
    score_priority,
    summarize_priorities,
)
from .scorer import PriorityScorer, get_priority_tier, tier_info
from .strategies import AIBackedStrategy, HeuristicStrategy, NumericStrategy, rank_messages
from .vocabulary import DEFAULT_VOCABULARY, KeywordVocabulary

__all__ = [
    "AIBackedStrategy",
    "AnalysisCache",
    "BatchScorer",
    "DEFAULT_VOCABULARY",
    "HeuristicClassifier",
    "HeuristicStrategy",
    "KeywordVocabulary",
    "LLMClient",
    "LLMError",
    "LLMThreadAnalyzer",
    "NumericStrategy",
    "OllamaClient",
    "PriorityScorer",
    "ThreadScoreOutcome",
    "classify",
    "classify_with_reason",
    "get_priority_tier",
    "normalize_messages",
    "priority_bucket",
    "rank_messages",
    "score_messages",
    "score_priority",
    "summarize_priorities",
    "tier_info",
]
