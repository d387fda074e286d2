"""
Tests for the publisher registry, credibility heuristics and the search
capabilities (directory, Google Fact Check and NewsAPI).
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from claimcheck.core.models import PublisherType, Stance
from claimcheck.sources.credibility import (
    confidence_from_rating, publisher_confidence, recency_score, stance_from_rating,
    stance_from_text, url_indicators,
)
from claimcheck.sources.directory import GOVERNMENT_INDICATORS, PublisherDirectorySource
from claimcheck.sources.fact_checkers import GOOGLE_FACTCHECK_API_URL, GoogleFactCheckSource
from claimcheck.sources.news import NEWS_API_URL, NewsAPISource, clean_html
from claimcheck.sources.publisher_registry import PublisherRegistry
from claimcheck.sources.scoring import FixedScoringStrategy, StochasticScoringStrategy


class TestPublisherRegistry:

    def setup_method(self):
        self.registry = PublisherRegistry()

    def test_get_publisher(self):
        assert self.registry.get_publisher('snopes').weight == 0.95
        assert self.registry.get_publisher('missing') is None

    def test_fact_checkers_for_region_and_language(self):
        publishers = self.registry.get_fact_checkers('BD', 'bn')

        assert [p.id for p in publishers] == [
            'ifcn_generic', 'bbc_bangla', 'rumorscanner_bd', 'dw_bangla', 'voa_bangla', 'boom_bangladesh']

    def test_government_sources_need_exact_region(self):
        assert [p.id for p in self.registry.get_government_sources('BD')] == ['bbs_gov_bd', 'mof_gov_bd']
        assert self.registry.get_government_sources('global') == []

    def test_listings_sorted_by_weight(self):
        weights = [p.weight for p in self.registry.get_all_publishers()]

        assert weights == sorted(weights, reverse=True)

    def test_find_by_url(self):
        assert self.registry.find_by_url('https://www.snopes.com/fact-check/rice-prices/').id == 'snopes'
        assert self.registry.find_by_url('') is None

    def test_find_or_create(self):
        assert self.registry.find_or_create('snopes').id == 'snopes'

        unknown = self.registry.find_or_create('Some Local Blog')
        assert unknown.id == 'unknown_some_local_blog'
        assert unknown.weight == 0.5
        assert unknown.type == PublisherType.FACT_CHECKER


class TestCredibility:

    def setup_method(self):
        self.registry = PublisherRegistry()

    def test_stance_from_text(self):
        claim = "Rice prices rose"

        assert stance_from_text("The latest survey confirms rice prices rose", claim) == Stance.SUPPORTS
        assert stance_from_text("The ministry denies that rice prices rose", claim) == Stance.REFUTES
        assert stance_from_text("Weather stayed mild across the region", claim) == Stance.NEUTRAL

    def test_stance_from_rating(self):
        assert stance_from_rating('Mostly True') == Stance.SUPPORTS
        assert stance_from_rating('False') == Stance.REFUTES
        assert stance_from_rating('Mixture') == Stance.NEUTRAL
        assert stance_from_rating(None) == Stance.NEUTRAL

    def test_confidence_from_rating(self):
        assert confidence_from_rating('False') == 90
        assert confidence_from_rating('Misleading') == 70
        assert confidence_from_rating('Unproven') == 40
        assert confidence_from_rating(None) == 50

    def test_publisher_confidence(self):
        assert publisher_confidence(self.registry.get_publisher('snopes'), Stance.REFUTES) == 100
        assert publisher_confidence(self.registry.get_publisher('prothom_alo'), Stance.NEUTRAL) == 83

    def test_url_indicators(self):
        assert url_indicators('https://www.snopes.com/fact-check/x') == ['secure_connection', 'trusted_domain']
        assert url_indicators('not a url') == ['invalid_url']
        assert 'institutional_domain' in url_indicators('http://stats.gov.bd/report')

    def test_recency_score(self, reference_time):
        assert recency_score(None) == 0.5
        assert recency_score(reference_time - timedelta(hours=3), reference_time) == 1.0
        assert recency_score(reference_time - timedelta(days=400), reference_time) == 0.2


class TestPublisherDirectorySource:

    def test_fixed_strategy_hits(self, reference_time):
        source = PublisherDirectorySource(strategy=FixedScoringStrategy(Stance.SUPPORTS, confidence=80),
                                          now=reference_time)

        hits = source.search('Rice prices rose', 'bn', 'fact_checker')

        assert [h['publisher'].id for h in hits] == ['ifcn_generic', 'bbc_bangla', 'rumorscanner_bd']
        first = hits[0]
        assert first['evidence_type'] == 'claimreview'
        assert first['title'] == 'Fact Check: Rice prices rose'
        assert first['stance'] == 'supports'
        assert first['confidence'] == 80
        assert first['published_at'] == reference_time - timedelta(days=1)
        assert first['language'] == 'bn'

    def test_government_hits(self, reference_time):
        source = PublisherDirectorySource(strategy=FixedScoringStrategy(), now=reference_time)

        hits = source.search('Rice prices rose', 'bn', 'government')

        assert len(hits) == 2
        assert hits[0]['evidence_type'] == 'kb'
        assert hits[0]['credibility_indicators'] == GOVERNMENT_INDICATORS
        assert hits[0]['stance'] == 'neutral'

    def test_no_coverage(self, reference_time):
        source = PublisherDirectorySource(strategy=FixedScoringStrategy(covered=False), now=reference_time)

        assert source.search('Rice prices rose', 'en', 'news') == []

    def test_unknown_category(self):
        source = PublisherDirectorySource(strategy=FixedScoringStrategy())

        with pytest.raises(ValueError):
            source.search('Rice prices rose', 'en', 'blogs')

    def test_seeded_strategy_is_reproducible(self):
        registry = PublisherRegistry()
        publisher = registry.get_publisher('prothom_alo')
        first = StochasticScoringStrategy(seed=7)
        second = StochasticScoringStrategy(seed=7)

        runs = [(first.score(publisher, 'Rice prices rose', 'news'),
                 second.score(publisher, 'Rice prices rose', 'news')) for _ in range(5)]

        assert all(a == b for a, b in runs)


class TestGoogleFactCheckSource:

    def setup_method(self):
        self.http_client = Mock()
        self.http_client.get_json.return_value = {
            'claims': [{
                'text': 'Rice prices doubled in a month',
                'claimReview': [{
                    'publisher': {'name': 'Rumor Scanner', 'site': 'rumorscanner.com'},
                    'url': 'https://www.rumorscanner.com/fact-check/rice',
                    'title': 'Rice price claim is false',
                    'reviewDate': '2024-05-20T00:00:00Z',
                    'textualRating': 'False',
                }],
            }]
        }
        self.source = GoogleFactCheckSource(api_key='test-key', http_client=self.http_client)

    def test_reviews_become_hits(self):
        hits = self.source.search('Rice prices doubled', 'bn', 'fact_checker', limit=3)

        assert len(hits) == 1
        hit = hits[0]
        assert hit['evidence_type'] == 'claimreview'
        assert hit['stance'] == 'refutes'
        assert hit['confidence'] == 90
        assert hit['fact_check_rating'] == 'False'
        assert hit['snippet'] == 'Rice prices doubled in a month'
        assert hit['credibility_indicators'] == [
            'verified_publisher', 'secure_source', 'dated_review', 'structured_rating']

    def test_request_parameters(self):
        self.source.search('Rice prices doubled', 'bn', 'fact_checker', limit=3)

        url = self.http_client.get_json.call_args.args[0]
        params = self.http_client.get_json.call_args.kwargs['params']
        assert url == GOOGLE_FACTCHECK_API_URL
        assert params == {'query': 'Rice prices doubled', 'languageCode': 'bn', 'key': 'test-key', 'pageSize': 3}

    def test_empty_response(self):
        self.http_client.get_json.return_value = {}

        assert self.source.search('Rice prices doubled', 'en', 'fact_checker') == []


class TestNewsAPISource:

    def setup_method(self):
        self.http_client = Mock()
        self.http_client.get_json.return_value = {
            'articles': [
                {
                    'source': {'name': 'The Daily Star'},
                    'url': 'https://www.thedailystar.net/news/rice-prices',
                    'title': 'Rice prices climb',
                    'description': '<p>Prices <b>rose</b> sharply</p>',
                    'publishedAt': '2024-05-31T08:00:00Z',
                },
                {'source': {'name': 'No Link'}, 'url': None, 'title': 'Dropped'},
            ]
        }
        self.source = NewsAPISource(api_key='news-key', http_client=self.http_client)

    def test_articles_become_hits(self):
        hits = self.source.search('Rice prices rose', 'en', 'news')

        assert len(hits) == 1
        assert hits[0]['source_name'] == 'The Daily Star'
        assert hits[0]['publisher_name'] == 'thedailystar.net'
        assert hits[0]['snippet'] == 'Prices rose sharply'
        assert 'stance' not in hits[0]

    def test_unsupported_language_falls_back_to_english(self):
        self.source.search('Rice prices rose', 'ar', 'news')

        url = self.http_client.get_json.call_args.args[0]
        params = self.http_client.get_json.call_args.kwargs['params']
        assert url == NEWS_API_URL
        assert params['language'] == 'en'

    def test_clean_html(self):
        assert clean_html(None) == ''
        assert clean_html('<div>Flood <i>warning</i></div>') == 'Flood warning'
