"""
Signature-keyed verdict cache with single-flight computation.

Claims with the same normalized text share a signature; the cache makes sure
at most one verification runs per signature and that later requests reuse
the stored verdict. An optional repository makes entries survive restarts.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from .models import Claim, Verdict
from ..constants import LogMessages


class ClaimCache:
    """
    In-process verdict cache with optional repository read/write-through.
    """

    def __init__(self, repository: Optional[Any] = None):
        self.repository = repository
        self.logger = logging.getLogger(__name__)
        self._entries: Dict[str, Tuple[Claim, Verdict]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._hits = 0
        self._misses = 0

    def lookup(self, signature: str) -> Optional[Verdict]:
        """Return the stored verdict for a signature, if any."""
        entry = self._lookup_entry(signature)
        return entry[1] if entry else None

    def lookup_entry(self, signature: str) -> Optional[Tuple[Claim, Verdict]]:
        """Return the stored (claim, verdict) pair for a signature, if any."""
        return self._lookup_entry(signature)

    def _lookup_entry(self, signature: str) -> Optional[Tuple[Claim, Verdict]]:
        entry = self._entries.get(signature)
        if entry is not None:
            return entry

        if self.repository is not None:
            try:
                stored = self.repository.lookup_by_signature(signature)
            except Exception as e:
                self.logger.warning(f"Repository lookup failed for {signature[:12]}: {e}")
                stored = None
            if stored is not None:
                self._entries[signature] = stored
                return stored
        return None

    def store(self, signature: str, claim: Claim, verdict: Verdict) -> None:
        """Remember a verdict for a signature, writing through to the repository."""
        self._entries[signature] = (claim, verdict)
        if self.repository is not None:
            try:
                self.repository.save_claim(claim)
                stored_claim = self.repository.get_claim_by_signature(signature) or claim
                self.repository.save_verdict(stored_claim.id, verdict)
            except Exception as e:
                self.logger.warning(f"Repository write failed for {signature[:12]}: {e}")

    def _acquire_slot(self, signature: str) -> asyncio.Lock:
        lock = self._locks.get(signature)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[signature] = lock
        self._lock_users[signature] = self._lock_users.get(signature, 0) + 1
        return lock

    def _release_slot(self, signature: str) -> None:
        remaining = self._lock_users[signature] - 1
        if remaining:
            self._lock_users[signature] = remaining
        else:
            # Last holder or waiter gone
            del self._lock_users[signature]
            del self._locks[signature]

    async def get_or_compute(self, claim: Claim,
                             compute: Callable[[], Awaitable[Verdict]]) -> Tuple[Claim, Verdict, bool]:
        """
        Return ``(claim, verdict, cached)`` for a claim.

        The check, the computation and the store happen under a per-signature
        lock, so concurrent requests for the same claim compute it once and
        the rest read the stored verdict. On a hit the returned claim is the
        stored one, so its id matches what was persisted.
        """
        signature = claim.claim_signature
        lock = self._acquire_slot(signature)
        try:
            async with lock:
                cached = self._lookup_entry(signature)
                if cached is not None:
                    self._hits += 1
                    self.logger.debug(LogMessages.CACHE_HIT.format(signature=signature[:12]))
                    return cached[0], cached[1], True

                self._misses += 1
                self.logger.debug(LogMessages.CACHE_MISS.format(signature=signature[:12]))
                verdict = await compute()
                self.store(signature, claim, verdict)
                return claim, verdict, False
        finally:
            self._release_slot(signature)

    def stats(self) -> Dict[str, int]:
        return {'hits': self._hits, 'misses': self._misses, 'size': len(self._entries)}

    def pending_signatures(self) -> int:
        """Number of signatures with a computation running or waiting."""
        return len(self._locks)

    def clear(self) -> None:
        """Drop in-process entries and counters; the repository is left untouched."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0
