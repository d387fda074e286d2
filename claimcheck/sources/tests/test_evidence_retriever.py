"""
Tests for the parallel evidence retriever: category isolation, deadlines,
cancellation, normalization and ranking.
"""

import asyncio
import logging
from unittest.mock import Mock

import pytest

from claimcheck.core.models import EvidenceType, PublisherType, Stance, Tier
from claimcheck.sources.base import SourceCategory
from claimcheck.sources.directory import PublisherDirectorySource
from claimcheck.sources.evidence_retriever import EvidenceRetriever
from claimcheck.sources.scoring import FixedScoringStrategy

CLAIM = "Rice prices rose sharply"


def news_hit(n=1, **overrides):
    hit = {
        'source_name': 'The Daily Star',
        'source_url': f'https://www.thedailystar.net/news/{n}',
        'title': f'Rice prices rose sharply, report {n}',
        'snippet': 'Market survey confirms rice prices rose sharply this week',
        'published_at': '2024-05-31T08:00:00Z',
        'evidence_type': 'news',
    }
    hit.update(overrides)
    return hit


class StaticSource:
    """Synchronous capability returning fixed hits."""
    name = 'static'

    def __init__(self, hits):
        self.hits = hits
        self.queries = []

    def search(self, query, language, category, limit=None):
        self.queries.append(query)
        return list(self.hits)


class FailingSource:
    name = 'failing'

    def search(self, query, language, category, limit=None):
        raise ConnectionError("upstream unavailable")


class SlowSource:
    """Asynchronous capability that outlives any reasonable deadline."""
    name = 'slow'

    def __init__(self, delay=10.0):
        self.delay = delay
        self.cancelled = False

    async def search(self, query, language, category, limit=None):
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return []


class TestEvidenceRetriever:

    def setup_method(self):
        self.retrievers = []

    def teardown_method(self):
        for retriever in self.retrievers:
            retriever.close()

    def make_retriever(self, **kwargs):
        retriever = EvidenceRetriever(**kwargs)
        self.retrievers.append(retriever)
        return retriever

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            EvidenceRetriever(category_timeout=0)

    @pytest.mark.asyncio
    async def test_failing_category_does_not_block_others(self, caplog):
        news = StaticSource([news_hit()])
        retriever = self.make_retriever(capabilities={
            SourceCategory.FACT_CHECKER: [FailingSource()],
            SourceCategory.NEWS: [news],
        })

        with caplog.at_level(logging.WARNING):
            result = await retriever.retrieve(CLAIM, 'en', Tier.FREE, claim_id='claim-1')

        assert result.failed_categories == ['fact_checker']
        assert news.queries == [f'"{CLAIM}"', f'{CLAIM} news']
        assert len(result.evidence) == 2
        assert all(e.evidence_type == EvidenceType.NEWS for e in result.evidence)
        assert "fact_checker" in caplog.text

    @pytest.mark.asyncio
    async def test_category_deadline(self):
        slow = SlowSource()
        retriever = self.make_retriever(
            capabilities={
                SourceCategory.FACT_CHECKER: [StaticSource([news_hit(evidence_type='claimreview')])],
                SourceCategory.NEWS: [slow],
            },
            category_timeout=0.05,
        )

        result = await retriever.retrieve(CLAIM, 'en', Tier.FREE)

        assert result.failed_categories == ['news']
        assert len(result.evidence) == 1
        assert result.evidence[0].evidence_type == EvidenceType.CLAIMREVIEW
        assert slow.cancelled is True

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        slow = SlowSource()
        retriever = self.make_retriever(
            capabilities={SourceCategory.FACT_CHECKER: [slow], SourceCategory.NEWS: [SlowSource()]},
            category_timeout=5.0,
        )

        task = asyncio.ensure_future(retriever.retrieve(CLAIM, 'en', Tier.FREE))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert slow.cancelled is True

    @pytest.mark.asyncio
    async def test_normalization_derives_scores(self):
        retriever = self.make_retriever(capabilities={SourceCategory.NEWS: [StaticSource([news_hit()])]})

        result = await retriever.retrieve(CLAIM, 'en', Tier.FREE, claim_id='claim-7')

        evidence = result.evidence[0]
        assert evidence.publisher.id == 'daily_star'
        assert evidence.stance == Stance.SUPPORTS
        assert evidence.claim_id == 'claim-7'
        assert 0.0 < evidence.relevance_score <= 1.0
        assert 20.0 <= evidence.confidence <= 100.0
        assert 'trusted_domain' in evidence.credibility_indicators
        assert result.failed_categories == []

    def test_invalid_hit_is_dropped(self, caplog):
        retriever = self.make_retriever()

        with caplog.at_level(logging.WARNING):
            evidence = retriever.normalize_hit(news_hit(confidence=150), CLAIM, 'en')

        assert evidence is None
        assert "Invalid evidence record" in caplog.text

    @pytest.mark.asyncio
    async def test_results_ranked_and_capped(self):
        hits = [news_hit(n, confidence=40 + n * 5) for n in range(10)]
        retriever = self.make_retriever(capabilities={SourceCategory.NEWS: [StaticSource(hits)]})

        result = await retriever.retrieve(CLAIM, 'en', Tier.FREE)

        assert len(result.evidence) == 8
        confidences = [e.confidence for e in result.evidence]
        assert confidences == sorted(confidences, reverse=True)
        assert result.summary.total_sources == 8
        assert result.summary.news_sources == 8

    @pytest.mark.asyncio
    async def test_premium_directory_retrieval(self, reference_time):
        directory = PublisherDirectorySource(strategy=FixedScoringStrategy(Stance.SUPPORTS), now=reference_time)
        retriever = self.make_retriever(directory_source=directory)

        result = await retriever.retrieve(CLAIM, 'bn', Tier.PREMIUM)

        assert len(result.evidence) == 15
        assert result.failed_categories == []
        assert result.summary.search_depth == 'comprehensive'
        assert result.summary.real_apis_used is False
        assert result.summary.total_sources == 15
        assert any(e.publisher.type == PublisherType.GOVERNMENT for e in result.evidence)
        assert f'{CLAIM} research' in result.search_queries

    def test_free_tier_categories(self):
        retriever = self.make_retriever()

        assert retriever.categories_for(Tier.FREE) == [SourceCategory.FACT_CHECKER, SourceCategory.NEWS]
        assert len(retriever.categories_for(Tier.PREMIUM)) == 4

    def test_capability_wiring(self):
        fact_check_source = Mock()
        news_source = Mock()
        retriever = self.make_retriever(fact_check_source=fact_check_source, news_source=news_source)

        premium_fact_checkers = retriever.capabilities_for(SourceCategory.FACT_CHECKER, Tier.PREMIUM)
        free_fact_checkers = retriever.capabilities_for(SourceCategory.FACT_CHECKER, Tier.FREE)

        assert premium_fact_checkers == [fact_check_source, retriever.directory_source]
        assert free_fact_checkers == [retriever.directory_source]
        assert retriever.capabilities_for(SourceCategory.NEWS, Tier.PREMIUM) == [news_source]
        assert retriever.capabilities_for(SourceCategory.GOVERNMENT, Tier.PREMIUM) == [retriever.directory_source]
