"""
Evidence sources: publisher registry, search capabilities and the retriever.
"""

from .base import SearchCapability, SourceCategory
from .http_client import HttpClient, create_http_client
from .publisher_registry import PUBLISHERS, PublisherRegistry, publisher_registry
from .scoring import CoverageScore, FixedScoringStrategy, ScoringStrategy, StochasticScoringStrategy
from .directory import PublisherDirectorySource
from .fact_checkers import GoogleFactCheckSource
from .news import NewsAPISource
from .evidence_retriever import EvidenceRetriever

__all__ = [
    "SearchCapability",
    "SourceCategory",
    "HttpClient",
    "create_http_client",
    "PUBLISHERS",
    "PublisherRegistry",
    "publisher_registry",
    "CoverageScore",
    "FixedScoringStrategy",
    "ScoringStrategy",
    "StochasticScoringStrategy",
    "PublisherDirectorySource",
    "GoogleFactCheckSource",
    "NewsAPISource",
    "EvidenceRetriever",
]
