"""
Constants for the claim verification pipeline.

Keeps the magic numbers, message templates and lookup tables used across
extraction, retrieval and verdict generation in one place.
"""

from typing import Final, Dict


SUPPORTED_LANGUAGES = ('en', 'bn', 'hi', 'ur', 'ar')

LANGUAGE_REGIONS: Dict[str, str] = {
    'en': 'global',
    'bn': 'BD',
    'hi': 'IN',
    'ur': 'PK',
    'ar': 'global',
}


class ConfigDefaults:
    """Default configuration values."""
    DEFAULT_LANGUAGE: Final[str] = 'en'
    # Per-category evidence deadline; kept inside the 2-5s window
    CATEGORY_TIMEOUT: Final[float] = 4.0
    MIN_CATEGORY_TIMEOUT: Final[float] = 2.0
    MAX_CATEGORY_TIMEOUT: Final[float] = 5.0
    REASONING_TIMEOUT: Final[float] = 30.0
    REQUEST_TIMEOUT: Final[int] = 10
    MAX_RETRIES: Final[int] = 2
    MAX_WORKERS: Final[int] = 8
    CONFIDENCE_THRESHOLD: Final[int] = 70
    FREE_CONFIDENCE_THRESHOLD: Final[int] = 60
    FREE_MAX_CLAIMS: Final[int] = 3
    PREMIUM_MAX_CLAIMS: Final[int] = 10
    FREE_MAX_EVIDENCE: Final[int] = 8
    PREMIUM_MAX_EVIDENCE: Final[int] = 15
    FREE_FACT_CHECKERS: Final[int] = 3
    PREMIUM_FACT_CHECKERS: Final[int] = 6
    MAX_CONCURRENT_CLAIMS: Final[int] = 4
    STORED_EVIDENCE_LIMIT: Final[int] = 10
    REASONING_MODEL: Final[str] = 'gpt-4o-mini'


class VerdictThresholds:
    """Numeric boundaries used by the rule cascade."""
    MIN_EVIDENCE: Final[int] = 2
    CONSENSUS_MIN_EVIDENCE: Final[int] = 3
    INSUFFICIENT_CONFIDENCE: Final[int] = 30
    SATIRE_CONFIDENCE: Final[int] = 85
    HIGH_CREDIBILITY_WEIGHT: Final[float] = 0.85
    SUMMARY_HIGH_CREDIBILITY_WEIGHT: Final[float] = 0.8
    MIXED_HIGH_CREDIBILITY_CONFIDENCE: Final[int] = 70
    CONSENSUS_RATIO: Final[float] = 0.7
    MIXED_RATIO: Final[float] = 0.3
    MIXED_CONFIDENCE: Final[int] = 65
    OUT_OF_CONTEXT_CONFIDENCE: Final[int] = 70
    STALE_CLAIM_YEARS: Final[int] = 5
    OUTDATED_DAYS: Final[int] = 365
    RECENT_DAYS: Final[int] = 7
    RECENCY_FACTOR_DAYS: Final[int] = 30
    LANGUAGE_MATCH_RATIO: Final[float] = 0.7
    NO_HIGH_CREDIBILITY_CAP: Final[int] = 70
    MIN_CONFIDENCE: Final[int] = 10
    MAX_CONFIDENCE: Final[int] = 100


class LogMessages:
    """Common log message templates."""
    EXTRACTION_DONE = "Extracted {count} claims using {method} in {time:.3f}s"
    CATEGORY_FAILED = "Evidence category '{category}' failed for claim {claim_id}: {error}"
    CATEGORY_TIMEOUT = "Evidence category '{category}' exceeded {timeout:.1f}s deadline for claim {claim_id}"
    RETRIEVAL_DONE = "Retrieved {count} evidence items for claim {claim_id} in {time:.3f}s"
    REASONING_FALLBACK = "External reasoning failed for claim, falling back to rule cascade: {error}"
    CACHE_HIT = "Cache hit for claim signature {signature}"
    CACHE_MISS = "Cache miss for claim signature {signature}"
    CLAIM_FAILED = "Claim processing failed for '{claim}': {error}"
    BATCH_DONE = "Processed {count} claims ({language}) in {time:.0f}ms"


class ErrorMessages:
    """Error message templates."""
    UNSUPPORTED_LANGUAGE = "Unsupported language '{language}'. Must be one of: {supported}"
    PIPELINE_FAILURE = "Verification failed due to a technical error: {error}"
    REASONING_UNAVAILABLE = "No reasoning capability configured"
    MALFORMED_REASONING = "Malformed reasoning response: {details}"
    INVALID_EVIDENCE = "Invalid evidence record: {details}"
