"""
Evidence retrieval across source categories.

Each category runs as its own asyncio task with a deadline; blocking source
calls go to a thread pool. Raw hits are validated into ``Evidence`` records,
ranked, truncated to the tier cap and annotated with credibility indicators.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..config import TierSettings, _default_tiers
from ..constants import ConfigDefaults, ErrorMessages, LogMessages
from ..core.models import (
    Evidence, EvidenceType, Publisher, PublisherType, RetrievalResult, RetrievalSummary, Tier,
)
from ..core.query_builder import QueryBuilder
from ..core.text_analysis import relevance_score
from ..error_handler import classify_error
from .base import SearchCapability, SourceCategory
from .credibility import (
    confidence_from_rating, enhanced_indicators, publisher_indicators, ranking_score,
    source_confidence, stance_from_rating, stance_from_text,
)
from .directory import PublisherDirectorySource
from .fact_checkers import GoogleFactCheckSource
from .news import NewsAPISource
from .publisher_registry import PublisherRegistry, publisher_registry

# How many of a category's queries are searched
QUERIES_PER_CATEGORY: Dict[SourceCategory, int] = {
    SourceCategory.FACT_CHECKER: 1,
    SourceCategory.NEWS: 2,
    SourceCategory.GOVERNMENT: 2,
    SourceCategory.ACADEMIC: 2,
}


class EvidenceRetriever:
    """
    Gathers evidence for a claim from every category its tier allows.

    ``capabilities`` replaces the default wiring with an explicit mapping of
    category to search capabilities.
    """

    def __init__(self,
                 registry: Optional[PublisherRegistry] = None,
                 query_builder: Optional[QueryBuilder] = None,
                 directory_source: Optional[PublisherDirectorySource] = None,
                 fact_check_source: Optional[GoogleFactCheckSource] = None,
                 news_source: Optional[NewsAPISource] = None,
                 capabilities: Optional[Dict[SourceCategory, List[SearchCapability]]] = None,
                 tier_settings: Optional[Dict[Tier, TierSettings]] = None,
                 category_timeout: float = ConfigDefaults.CATEGORY_TIMEOUT,
                 executor: Optional[ThreadPoolExecutor] = None,
                 max_workers: int = ConfigDefaults.MAX_WORKERS):
        if category_timeout <= 0:
            raise ValueError("category_timeout must be positive")

        self.registry = registry or publisher_registry
        self.query_builder = query_builder or QueryBuilder()
        self.directory_source = directory_source or PublisherDirectorySource(self.registry)
        self.fact_check_source = fact_check_source
        self.news_source = news_source
        self.capabilities = capabilities
        self.tier_settings = tier_settings or _default_tiers()
        self.category_timeout = category_timeout
        self.executor = executor or ThreadPoolExecutor(max_workers=max_workers)
        self.logger = logging.getLogger(__name__)

    def categories_for(self, tier: Tier) -> List[SourceCategory]:
        settings = self.tier_settings[tier]
        categories = [SourceCategory.FACT_CHECKER, SourceCategory.NEWS]
        if settings.include_government:
            categories.append(SourceCategory.GOVERNMENT)
        if settings.include_academic:
            categories.append(SourceCategory.ACADEMIC)
        return categories

    def uses_real_apis(self, tier: Tier) -> bool:
        if self.capabilities is not None:
            return False
        return tier == Tier.PREMIUM and (self.fact_check_source is not None or self.news_source is not None)

    def capabilities_for(self, category: SourceCategory, tier: Tier) -> List[SearchCapability]:
        if self.capabilities is not None:
            return list(self.capabilities.get(category, []))

        real_apis = self.uses_real_apis(tier)
        if category == SourceCategory.FACT_CHECKER:
            sources: List[Any] = []
            if real_apis and self.fact_check_source is not None:
                sources.append(self.fact_check_source)
            sources.append(self.directory_source)
            return sources
        if category == SourceCategory.NEWS and real_apis and self.news_source is not None:
            return [self.news_source]
        return [self.directory_source]

    async def retrieve(self, claim_text: str, language: str = 'en', tier: Tier = Tier.FREE,
                       claim_id: Optional[str] = None) -> RetrievalResult:
        """
        Retrieve, normalize and rank evidence for one claim.

        A failing or timed-out category contributes nothing and is reported
        in ``failed_categories``. Cancellation propagates to every category
        task.
        """
        start_time = time.time()
        settings = self.tier_settings[tier]
        categories = self.categories_for(tier)

        search_queries: List[str] = []
        for category in categories:
            for query in self.query_builder.queries_for_category(category.value, claim_text):
                if query not in search_queries:
                    search_queries.append(query)

        tasks = [
            asyncio.ensure_future(self._run_category(category, claim_text, language, tier, settings, claim_id))
            for category in categories
        ]
        try:
            outcomes = await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        evidence: List[Evidence] = []
        failed_categories: List[str] = []
        for category, items, failed in outcomes:
            evidence.extend(items)
            if failed:
                failed_categories.append(category.value)

        now = datetime.now()
        ranked = sorted(evidence, key=lambda e: ranking_score(e, now), reverse=True)[:settings.max_evidence]
        enhanced = [replace(e, credibility_indicators=tuple(enhanced_indicators(e))) for e in ranked]

        processing_time = time.time() - start_time
        self.logger.info(LogMessages.RETRIEVAL_DONE.format(
            count=len(enhanced), claim_id=claim_id or '-', time=processing_time))

        return RetrievalResult(
            evidence=enhanced,
            processing_time=processing_time,
            search_queries=search_queries,
            summary=self._summarize(enhanced, settings.search_depth, self.uses_real_apis(tier)),
            failed_categories=failed_categories,
        )

    async def _run_category(self, category: SourceCategory, claim_text: str, language: str, tier: Tier,
                            settings: TierSettings, claim_id: Optional[str]) -> Tuple[SourceCategory, List[Evidence], bool]:
        """Run one category under its deadline; failures yield an empty contribution."""
        try:
            items, failed = await asyncio.wait_for(
                self._search_category(category, claim_text, language, tier, settings, claim_id),
                timeout=self.category_timeout
            )
            return category, items, failed
        except asyncio.TimeoutError:
            self.logger.warning(LogMessages.CATEGORY_TIMEOUT.format(
                category=category.value, timeout=self.category_timeout, claim_id=claim_id or '-'))
            return category, [], True
        except Exception as e:
            error = classify_error(e, f"evidence category {category.value}")
            self.logger.warning(LogMessages.CATEGORY_FAILED.format(
                category=category.value, claim_id=claim_id or '-', error=error))
            return category, [], True

    async def _search_category(self, category: SourceCategory, claim_text: str, language: str, tier: Tier,
                               settings: TierSettings, claim_id: Optional[str]) -> Tuple[List[Evidence], bool]:
        capabilities = self.capabilities_for(category, tier)
        queries = self.query_builder.queries_for_category(category.value, claim_text)
        queries = queries[:QUERIES_PER_CATEGORY[category]]
        limit = settings.fact_checker_count if category == SourceCategory.FACT_CHECKER else None

        evidence: List[Evidence] = []
        errors = 0
        for capability in capabilities:
            try:
                for query in queries:
                    hits = await self._call_capability(capability, query, language, category, limit)
                    for hit in hits:
                        item = self.normalize_hit(hit, claim_text, language, claim_id)
                        if item is not None:
                            evidence.append(item)
            except Exception as e:
                errors += 1
                error = classify_error(e, f"{getattr(capability, 'name', type(capability).__name__)} search")
                self.logger.warning(LogMessages.CATEGORY_FAILED.format(
                    category=category.value, claim_id=claim_id or '-', error=error))

        failed = bool(capabilities) and errors == len(capabilities)
        return evidence, failed

    async def _call_capability(self, capability: SearchCapability, query: str, language: str,
                               category: SourceCategory, limit: Optional[int]) -> List[Dict[str, Any]]:
        if asyncio.iscoroutinefunction(capability.search):
            return await capability.search(query, language, category.value, limit)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor, capability.search, query, language, category.value, limit)

    def _resolve_publisher(self, hit: Dict[str, Any]) -> Publisher:
        publisher = hit.get('publisher')
        if isinstance(publisher, Publisher):
            return publisher
        if isinstance(publisher, dict):
            return Publisher.from_dict(publisher)
        return (self.registry.find_by_url(hit.get('source_url') or '') or
                self.registry.find_or_create(hit.get('publisher_name') or hit.get('source_name') or ''))

    def normalize_hit(self, hit: Dict[str, Any], claim_text: str, language: str,
                      claim_id: Optional[str] = None) -> Optional[Evidence]:
        """Validate a raw hit into Evidence, deriving missing scores. Invalid hits yield None."""
        try:
            publisher = self._resolve_publisher(hit)
            text = f"{hit.get('snippet') or ''} {hit.get('title') or ''}"
            rating = hit.get('fact_check_rating')

            relevance = hit.get('relevance_score')
            if relevance is None:
                relevance = relevance_score(text, claim_text)

            stance = hit.get('stance')
            if stance is None:
                stance = stance_from_rating(rating) if rating else stance_from_text(text, claim_text, language)

            confidence = hit.get('confidence')
            if confidence is None:
                confidence = confidence_from_rating(rating) if rating else source_confidence(publisher, relevance)

            return Evidence.from_dict({
                'id': hit.get('id'),
                'claim_id': claim_id,
                'source_name': hit.get('source_name') or publisher.name,
                'source_url': hit.get('source_url'),
                'publisher': publisher,
                'snippet': hit.get('snippet'),
                'title': hit.get('title'),
                'stance': stance,
                'confidence': confidence,
                'relevance_score': relevance,
                'evidence_type': hit.get('evidence_type') or EvidenceType.NEWS.value,
                'language': hit.get('language') or language,
                'published_at': hit.get('published_at'),
                'credibility_indicators': hit.get('credibility_indicators') or publisher_indicators(publisher),
                'fact_check_rating': rating,
            })
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning(ErrorMessages.INVALID_EVIDENCE.format(details=e))
            return None

    def _summarize(self, evidence: List[Evidence], search_depth: str, real_apis_used: bool) -> RetrievalSummary:
        return RetrievalSummary(
            total_sources=len(evidence),
            fact_checkers=sum(1 for e in evidence if e.evidence_type == EvidenceType.CLAIMREVIEW),
            news_sources=sum(1 for e in evidence if e.evidence_type == EvidenceType.NEWS),
            government_sources=sum(1 for e in evidence if e.evidence_type == EvidenceType.KB
                                   and e.publisher.type == PublisherType.GOVERNMENT),
            academic_sources=sum(1 for e in evidence if e.evidence_type == EvidenceType.KB
                                 and e.publisher.type == PublisherType.ACADEMIC),
            search_depth=search_depth,
            real_apis_used=real_apis_used,
        )

    def close(self):
        self.executor.shutdown(wait=False)
