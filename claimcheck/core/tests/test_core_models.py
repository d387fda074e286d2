"""
Unit tests for the core data model.
"""

from datetime import date, datetime

import pytest

from claimcheck.core.models import (
    Claim, ClaimResult, Evidence, EvidenceSummary, Publisher, PublisherType, Stance, Tier,
    Verdict, VerdictLabel, compute_claim_signature, normalize_claim_text,
)


def make_verdict(**overrides):
    values = dict(
        verdict=VerdictLabel.TRUE,
        confidence=80,
        rationale=('Official data confirms the figure',),
        evidence_summary=EvidenceSummary(supporting=2, neutral=1),
        freshness_date=date(2024, 6, 1),
    )
    values.update(overrides)
    return Verdict(**values)


class TestClaimSignature:

    def test_normalization(self):
        assert normalize_claim_text("  Prices   ROSE\n today ") == "prices rose today"

    def test_signature_ignores_case_and_spacing(self):
        assert compute_claim_signature("Prices rose  today") == compute_claim_signature(" prices ROSE today ")
        assert compute_claim_signature("Prices rose today") != compute_claim_signature("Prices fell today")

    def test_claim_create(self):
        claim = Claim.create("  Prices rose   today ", 'en', extraction_confidence=0.8)

        assert claim.canonical_text == "Prices rose today"
        assert claim.claim_signature == compute_claim_signature("prices rose today")
        assert claim.id


class TestPublisher:

    def test_weight_must_be_in_range(self):
        with pytest.raises(ValueError):
            Publisher(id='x', name='X', weight=1.2, region='global', lang='en', type=PublisherType.NEWS)

    def test_from_dict_defaults(self):
        publisher = Publisher.from_dict({'id': 'afp', 'name': 'AFP', 'weight': 0.9})

        assert publisher.type == PublisherType.FACT_CHECKER
        assert publisher.region == 'global'


class TestEvidence:

    def setup_method(self):
        self.publisher = Publisher(id='bbc', name='BBC', weight=0.85, region='global',
                                   lang='en', type=PublisherType.NEWS)
        self.payload = {
            'publisher': self.publisher,
            'stance': 'refutes',
            'confidence': 75,
            'relevance_score': 0.6,
            'evidence_type': 'news',
            'published_at': '2024-05-30T10:00:00Z',
        }

    def test_from_dict_validates_and_fills_defaults(self):
        evidence = Evidence.from_dict(self.payload)

        assert evidence.stance == Stance.REFUTES
        assert evidence.source_name == 'BBC'
        assert evidence.language == 'en'
        assert evidence.published_at.year == 2024
        assert evidence.id

    @pytest.mark.parametrize("field,value", [
        ('confidence', 150),
        ('relevance_score', 1.5),
        ('stance', 'agrees'),
        ('evidence_type', 'blog'),
        ('published_at', 'yesterday'),
    ])
    def test_from_dict_rejects_invalid_fields(self, field, value):
        self.payload[field] = value

        with pytest.raises(ValueError):
            Evidence.from_dict(self.payload)

    def test_missing_field(self):
        del self.payload['stance']

        with pytest.raises(ValueError):
            Evidence.from_dict(self.payload)

    def test_composite_score(self):
        evidence = Evidence.from_dict(self.payload)

        assert evidence.composite_score == pytest.approx(75 * 0.4 + 85 * 0.4 + 60 * 0.2)

    def test_age_in_days_with_mixed_timezones(self):
        evidence = Evidence.from_dict(self.payload)

        assert evidence.age_in_days(datetime(2024, 6, 1, 10, 0, 0)) == pytest.approx(2.0)


class TestVerdict:

    def test_confidence_bounds(self):
        with pytest.raises(ValueError):
            make_verdict(confidence=101)

    def test_key_evidence_limit(self, make_evidence):
        with pytest.raises(ValueError):
            make_verdict(key_evidence=tuple(make_evidence() for _ in range(6)))

    def test_dict_round_trip(self, make_evidence):
        verdict = make_verdict(key_evidence=(make_evidence(),), limitations=('Limited evidence sources',))

        restored = Verdict.from_dict(verdict.to_dict())

        assert restored.verdict == verdict.verdict
        assert restored.confidence == verdict.confidence
        assert restored.key_evidence[0].id == verdict.key_evidence[0].id
        assert restored.evidence_summary.total == 3


class TestResults:

    def test_summary_total(self):
        summary = EvidenceSummary(supporting=2, refuting=1, neutral=4)

        assert summary.total == 7
        assert summary.to_dict()['total'] == 7

    def test_degraded_result(self):
        claim = Claim.create("Prices rose today", 'en')

        result = ClaimResult.degraded(claim, "Verification failed due to a technical error: boom")

        assert result.verdict == VerdictLabel.UNVERIFIED
        assert result.confidence == 0
        assert result.to_dict()['error'].endswith('boom')

    def test_from_verdict(self, make_evidence):
        claim = Claim.create("Prices rose today", 'en')
        evidence = [make_evidence()]

        result = ClaimResult.from_verdict(claim, make_verdict(), evidence, processing_time_ms=12.5)
        data = result.to_dict()

        assert data['verdict'] == 'true'
        assert data['claim_text'] == "Prices rose today"
        assert data['cached'] is False
        assert len(data['evidence']) == 1

    def test_tier_from_plan(self):
        assert Tier.from_plan('Pro') == Tier.PREMIUM
        assert Tier.from_plan('basic') == Tier.FREE
        assert Tier.from_plan('') == Tier.FREE
