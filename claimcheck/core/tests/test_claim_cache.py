"""
Tests for the signature-keyed verdict cache.
"""

import asyncio
import logging
from datetime import date
from unittest.mock import Mock

import pytest

from claimcheck.core.claim_cache import ClaimCache
from claimcheck.core.models import Claim, EvidenceSummary, Verdict, VerdictLabel


def make_verdict(label=VerdictLabel.TRUE, confidence=80):
    return Verdict(
        verdict=label,
        confidence=confidence,
        rationale=('Sources agree',),
        evidence_summary=EvidenceSummary(supporting=3),
        freshness_date=date(2024, 6, 1),
    )


class TestClaimCache:

    def setup_method(self):
        self.cache = ClaimCache()
        self.claim = Claim.create("Bus fares doubled last month", 'en')

    @pytest.mark.asyncio
    async def test_miss_then_hit(self):
        compute_calls = []

        async def compute():
            compute_calls.append(1)
            return make_verdict()

        first_claim, first, first_cached = await self.cache.get_or_compute(self.claim, compute)
        same_claim = Claim.create("  bus FARES doubled   last month", 'en')
        second_claim, second, second_cached = await self.cache.get_or_compute(same_claim, compute)

        assert first_cached is False
        assert second_cached is True
        assert second is first
        assert second_claim is first_claim
        assert second_claim.id == self.claim.id != same_claim.id
        assert len(compute_calls) == 1
        assert self.cache.stats() == {'hits': 1, 'misses': 1, 'size': 1}

    @pytest.mark.asyncio
    async def test_concurrent_requests_compute_once(self):
        compute_calls = []

        async def compute():
            compute_calls.append(1)
            await asyncio.sleep(0.01)
            return make_verdict()

        results = await asyncio.gather(*[
            self.cache.get_or_compute(Claim.create("Bus fares doubled last month", 'en'), compute)
            for _ in range(5)
        ])

        assert len(compute_calls) == 1
        assert sum(1 for _, _, cached in results if not cached) == 1
        assert all(verdict is results[0][1] for _, verdict, _ in results)
        assert self.cache.pending_signatures() == 0

    @pytest.mark.asyncio
    async def test_lock_dropped_once_idle(self):
        started = asyncio.Event()
        release = asyncio.Event()

        async def compute():
            started.set()
            await release.wait()
            return make_verdict()

        first = asyncio.ensure_future(self.cache.get_or_compute(self.claim, compute))
        await started.wait()
        second = asyncio.ensure_future(
            self.cache.get_or_compute(Claim.create("Bus fares doubled last month", 'en'), compute))
        await asyncio.sleep(0)

        assert self.cache.pending_signatures() == 1

        release.set()
        await asyncio.gather(first, second)

        assert second.result()[2] is True
        assert self.cache.pending_signatures() == 0

    @pytest.mark.asyncio
    async def test_failed_compute_is_not_stored(self):
        async def failing():
            raise RuntimeError("retrieval exploded")

        with pytest.raises(RuntimeError):
            await self.cache.get_or_compute(self.claim, failing)

        assert self.cache.lookup(self.claim.claim_signature) is None
        assert self.cache.pending_signatures() == 0

    def test_clear(self):
        self.cache.store(self.claim.claim_signature, self.claim, make_verdict())

        self.cache.clear()

        assert self.cache.lookup(self.claim.claim_signature) is None
        assert self.cache.stats()['size'] == 0


class TestClaimCacheRepository:

    def setup_method(self):
        self.repository = Mock()
        self.repository.lookup_by_signature.return_value = None
        self.claim = Claim.create("Bus fares doubled last month", 'en')

    def test_store_writes_through(self):
        stored_claim = Claim.create("Bus fares doubled last month", 'en')
        self.repository.get_claim_by_signature.return_value = stored_claim
        cache = ClaimCache(repository=self.repository)
        verdict = make_verdict()

        cache.store(self.claim.claim_signature, self.claim, verdict)

        self.repository.save_claim.assert_called_once_with(self.claim)
        self.repository.save_verdict.assert_called_once_with(stored_claim.id, verdict)

    @pytest.mark.asyncio
    async def test_reads_through_to_repository(self):
        verdict = make_verdict(VerdictLabel.FALSE, 85)
        self.repository.lookup_by_signature.return_value = (self.claim, verdict)
        cache = ClaimCache(repository=self.repository)

        async def compute():
            raise AssertionError("should not compute")

        fresh_claim = Claim.create("Bus fares doubled last month", 'en')
        stored_claim, result, cached = await cache.get_or_compute(fresh_claim, compute)

        assert cached is True
        assert result is verdict
        assert stored_claim is self.claim

    def test_repository_failure_is_logged(self, caplog):
        self.repository.save_claim.side_effect = RuntimeError("disk full")
        cache = ClaimCache(repository=self.repository)

        with caplog.at_level(logging.WARNING):
            cache.store(self.claim.claim_signature, self.claim, make_verdict())

        assert "Repository write failed" in caplog.text
        assert cache.lookup(self.claim.claim_signature) is not None
