"""
Core claim verification components: data model, extraction, query building and caching.
"""

from .models import (
    Claim,
    ClaimResult,
    BatchResult,
    Evidence,
    EvidenceSummary,
    EvidenceType,
    Publisher,
    PublisherType,
    Stance,
    Tier,
    Verdict,
    VerdictLabel,
    compute_claim_signature,
)
from .claim_extractor import ClaimExtractor, extract_claims
from .query_builder import QueryBuilder
from .claim_cache import ClaimCache

__all__ = [
    'Claim',
    'ClaimResult',
    'BatchResult',
    'Evidence',
    'EvidenceSummary',
    'EvidenceType',
    'Publisher',
    'PublisherType',
    'Stance',
    'Tier',
    'Verdict',
    'VerdictLabel',
    'compute_claim_signature',
    'ClaimExtractor',
    'extract_claims',
    'QueryBuilder',
    'ClaimCache',
]
