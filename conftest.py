"""
Global pytest configuration for claimcheck.
Forces the testing environment and provides shared evidence builders.
"""

import itertools
import os
from datetime import datetime, timedelta

import pytest

from claimcheck.config import Config
from claimcheck.core.models import Evidence, EvidenceType, Publisher, PublisherType, Stance

REFERENCE_TIME = datetime(2024, 6, 1, 12, 0, 0)

# Distinct wording so no two snippets look copy-pasted
SNIPPET_WORDS = [
    'Officials published quarterly figures',
    'Economists reviewed regional output',
    'Analysts compared several datasets',
    'Reporters interviewed ministry staff',
    'Researchers examined survey responses',
    'Auditors checked budget documents',
    'Journalists traced original statements',
    'Statisticians recalculated annual totals',
]


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment for all tests."""
    original_env = os.environ.get('CLAIMCHECK_ENV')
    os.environ['CLAIMCHECK_ENV'] = 'testing'
    Config.reset()

    yield

    if original_env:
        os.environ['CLAIMCHECK_ENV'] = original_env
    else:
        os.environ.pop('CLAIMCHECK_ENV', None)
    Config.reset()


@pytest.fixture
def reference_time():
    return REFERENCE_TIME


@pytest.fixture
def make_evidence():
    """Factory for Evidence records published relative to REFERENCE_TIME."""
    counter = itertools.count(1)

    def _make(stance='supports', weight=0.9, confidence=70.0, relevance=0.8, evidence_type='news',
              language='en', age_days=1, title=None, snippet=None, source_name=None,
              publisher_name=None, publisher_id=None, indicators=('verified_publisher',), rating=None):
        n = next(counter)
        name = publisher_name or source_name or f"Outlet {n}"
        publisher = Publisher(
            id=publisher_id or f"outlet_{n}",
            name=name,
            weight=weight,
            region='global',
            lang='en',
            type=PublisherType.NEWS,
            url=f"https://outlet{n}.example.org",
        )
        return Evidence(
            id=f"ev_{n}",
            claim_id=None,
            source_name=source_name or name,
            source_url=f"https://outlet{n}.example.org/story",
            publisher=publisher,
            snippet=snippet if snippet is not None else f"{SNIPPET_WORDS[(n - 1) % len(SNIPPET_WORDS)]} {n}",
            title=title if title is not None else f"Report {n}",
            stance=Stance(stance),
            confidence=confidence,
            relevance_score=relevance,
            evidence_type=EvidenceType(evidence_type),
            language=language,
            published_at=None if age_days is None else REFERENCE_TIME - timedelta(days=age_days),
            credibility_indicators=tuple(indicators),
            fact_check_rating=rating,
        )

    return _make
