"""
Tests for the SQLite verification repository.
"""

from datetime import date

import pytest

from claimcheck.core.models import Claim, EvidenceSummary, Verdict, VerdictLabel
from claimcheck.repositories import RepositoryFactory, SQLiteVerificationRepository, create_verification_repository


@pytest.fixture
def repository(tmp_path):
    """File-backed repository in a temporary directory."""
    repo = SQLiteVerificationRepository(str(tmp_path / "claims.db"))
    yield repo
    repo.close()


def make_verdict(label=VerdictLabel.FALSE, confidence=85, key_evidence=()):
    return Verdict(
        verdict=label,
        confidence=confidence,
        rationale=('Fact-checkers refute the claim', 'Official data disagrees'),
        evidence_summary=EvidenceSummary(refuting=3, neutral=1),
        freshness_date=date(2024, 6, 1),
        key_evidence=key_evidence,
        limitations=('Limited evidence sources',),
    )


class TestSQLiteVerificationRepository:

    def setup_method(self):
        self.claim = Claim.create("Fuel prices doubled overnight", 'en', extraction_confidence=0.8)

    def test_claim_round_trip(self, repository):
        assert repository.save_claim(self.claim) is True

        stored = repository.get_claim_by_id(self.claim.id)

        assert stored.canonical_text == self.claim.canonical_text
        assert stored.claim_signature == self.claim.claim_signature
        assert stored.extraction_confidence == 0.8

    def test_duplicate_signature_keeps_first_claim(self, repository):
        repository.save_claim(self.claim)
        duplicate = Claim.create("fuel PRICES doubled overnight", 'en')

        assert repository.save_claim(duplicate) is False
        assert repository.get_claim_by_signature(duplicate.claim_signature).id == self.claim.id

    def test_evidence_is_capped(self, repository, make_evidence):
        repository.save_claim(self.claim)
        evidence = [make_evidence('refutes', age_days=n) for n in range(12)]

        written = repository.save_evidence(self.claim.id, evidence)
        stored = repository.get_evidence(self.claim.id)

        assert written == 10
        assert [e.id for e in stored] == [e.id for e in evidence[:10]]
        assert stored[0].publisher.name == evidence[0].publisher.name

    def test_verdict_round_trip(self, repository, make_evidence):
        repository.save_claim(self.claim)
        verdict = make_verdict(key_evidence=(make_evidence('refutes'),))

        repository.save_verdict(self.claim.id, verdict)
        stored = repository.get_verdict(self.claim.id)

        assert stored.verdict == VerdictLabel.FALSE
        assert stored.confidence == 85
        assert stored.rationale == verdict.rationale
        assert stored.freshness_date == date(2024, 6, 1)
        assert len(stored.key_evidence) == 1

    def test_verdict_is_replaced(self, repository):
        repository.save_claim(self.claim)
        repository.save_verdict(self.claim.id, make_verdict())

        repository.save_verdict(self.claim.id, make_verdict(VerdictLabel.MISLEADING, 65))

        assert repository.get_verdict(self.claim.id).verdict == VerdictLabel.MISLEADING

    def test_lookup_by_signature(self, repository):
        repository.save_claim(self.claim)
        assert repository.lookup_by_signature(self.claim.claim_signature) is None

        repository.save_verdict(self.claim.id, make_verdict())
        claim, verdict = repository.lookup_by_signature(self.claim.claim_signature)

        assert claim.id == self.claim.id
        assert verdict.verdict == VerdictLabel.FALSE
        assert repository.lookup_by_signature("0" * 64) is None

    def test_analysis_metadata(self, repository):
        repository.save_claim(self.claim)
        repository.save_analysis_metadata(self.claim.id, {
            'methodology': ['Rule-based analysis'],
            'search_queries': ['Fuel prices doubled overnight news'],
            'processing_stats': {'evidence_count': 4},
        })

        metadata = repository.get_analysis_metadata(self.claim.id)

        assert metadata['methodology'] == ['Rule-based analysis']
        assert metadata['processing_stats'] == {'evidence_count': 4}
        assert metadata['limitations'] == []

    def test_missing_records(self, repository):
        assert repository.get_claim_by_id('missing') is None
        assert repository.get_verdict('missing') is None
        assert repository.get_analysis_metadata('missing') is None
        assert repository.get_evidence('missing') == []


class TestRepositoryFactory:

    def test_in_memory_repository_is_shared(self):
        factory = RepositoryFactory()

        repo = factory.get_verification_repository()

        assert repo is factory.get_verification_repository()
        claim = Claim.create("Fuel prices doubled overnight", 'en')
        repo.save_claim(claim)
        assert repo.get_claim_by_id(claim.id) is not None
        repo.close()

    def test_create_verification_repository(self):
        repo = create_verification_repository()

        assert isinstance(repo, SQLiteVerificationRepository)
        assert repo.db_path == ":memory:"
        repo.close()
