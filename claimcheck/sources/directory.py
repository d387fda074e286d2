"""
Publisher directory source.

Searches the publisher registry for a category and lets a scoring strategy
decide which publishers have coverage of the query.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..constants import LANGUAGE_REGIONS
from ..core.models import Publisher
from .base import SourceCategory
from .credibility import publisher_indicators
from .publisher_registry import PublisherRegistry, publisher_registry
from .scoring import ScoringStrategy, StochasticScoringStrategy

GOVERNMENT_INDICATORS = ['official_source', 'government_verified', 'primary_data']
ACADEMIC_INDICATORS = ['peer_reviewed', 'academic_institution', 'research_based']

# Default number of publishers consulted per query
PUBLISHERS_PER_QUERY: Dict[SourceCategory, int] = {
    SourceCategory.FACT_CHECKER: 3,
    SourceCategory.NEWS: 5,
    SourceCategory.GOVERNMENT: 3,
    SourceCategory.ACADEMIC: 3,
}

TEMPLATES: Dict[SourceCategory, Dict[str, Any]] = {
    SourceCategory.FACT_CHECKER: {
        'evidence_type': 'claimreview',
        'title': 'Fact Check: {query:.50}',
        'snippet': 'Our analysis of this claim reviewed: {query:.80}',
    },
    SourceCategory.NEWS: {
        'evidence_type': 'news',
        'title': 'News Report: {query:.50}',
        'snippet': 'Our reporting on {query:.100}',
    },
    SourceCategory.GOVERNMENT: {
        'evidence_type': 'kb',
        'title': 'Official Statement: {query:.40}',
        'snippet': 'Official records on {query:.80}',
    },
    SourceCategory.ACADEMIC: {
        'evidence_type': 'kb',
        'title': 'Research Study: {query:.45}',
        'snippet': 'Academic research on {query:.90}',
    },
}


class PublisherDirectorySource:
    """
    Search capability over the registry's publishers.

    Used for government and academic evidence and as the fallback for fact
    checkers and news when no API key is configured.
    """

    name = 'publisher_directory'

    def __init__(self, registry: Optional[PublisherRegistry] = None,
                 strategy: Optional[ScoringStrategy] = None,
                 now: Optional[datetime] = None):
        self.registry = registry or publisher_registry
        self.strategy = strategy or StochasticScoringStrategy()
        self._now = now
        self.logger = logging.getLogger(__name__)

    def publishers_for(self, category: SourceCategory, language: str) -> List[Publisher]:
        region = LANGUAGE_REGIONS.get(language, 'global')
        if category == SourceCategory.FACT_CHECKER:
            return self.registry.get_fact_checkers(region, language)
        if category == SourceCategory.NEWS:
            return self.registry.get_news_sources(region, language)
        if category == SourceCategory.GOVERNMENT:
            return self.registry.get_government_sources(region)
        return self.registry.get_academic_sources(region, language)

    def search(self, query: str, language: str, category: str,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        source_category = SourceCategory(category)
        publishers = self.publishers_for(source_category, language)
        publishers = publishers[:limit or PUBLISHERS_PER_QUERY[source_category]]
        now = self._now or datetime.now()

        hits = []
        for publisher in publishers:
            coverage = self.strategy.score(publisher, query, category)
            if coverage is None:
                continue
            hits.append(self._build_hit(publisher, source_category, query, language, coverage, now))

        self.logger.debug(f"Directory search '{category}' found {len(hits)}/{len(publishers)} publishers")
        return hits

    def _build_hit(self, publisher: Publisher, category: SourceCategory, query: str,
                   language: str, coverage, now: datetime) -> Dict[str, Any]:
        template = TEMPLATES[category]
        if category == SourceCategory.GOVERNMENT:
            indicators = list(GOVERNMENT_INDICATORS)
        elif category == SourceCategory.ACADEMIC:
            indicators = list(ACADEMIC_INDICATORS)
        else:
            indicators = publisher_indicators(publisher)

        return {
            'source_name': publisher.name,
            'publisher': publisher,
            'source_url': publisher.url or '',
            'title': template['title'].format(query=query),
            'snippet': template['snippet'].format(query=query),
            'published_at': now - timedelta(days=coverage.age_days),
            'evidence_type': template['evidence_type'],
            'stance': coverage.stance.value,
            'confidence': coverage.confidence,
            'relevance_score': coverage.relevance,
            'language': language,
            'credibility_indicators': indicators,
        }
