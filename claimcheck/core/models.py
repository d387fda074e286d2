"""
Data structures and models for claims, evidence and verdicts.
"""

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Stance(Enum):
    """Position of an evidence item relative to a claim."""
    SUPPORTS = "supports"
    REFUTES = "refutes"
    NEUTRAL = "neutral"


class EvidenceType(Enum):
    """Kind of source an evidence item came from."""
    CLAIMREVIEW = "claimreview"  # Structured fact-check
    NEWS = "news"
    KB = "kb"                    # Government/academic knowledge base


class VerdictLabel(Enum):
    """Possible verdicts for claim verification."""
    TRUE = "true"
    FALSE = "false"
    MISLEADING = "misleading"
    SATIRE = "satire"
    OUT_OF_CONTEXT = "out_of_context"
    UNVERIFIED = "unverified"


class ClaimType(Enum):
    """Types of extracted claims."""
    FACTUAL = "factual"
    OPINION = "opinion"
    PREDICTION = "prediction"


class PublisherType(Enum):
    """Publisher classification used for credibility bonuses and filtering."""
    FACT_CHECKER = "fact_checker"
    NEWS = "news"
    GOVERNMENT = "government"
    ACADEMIC = "academic"
    INTERNATIONAL = "international"


class Tier(Enum):
    """Request plan controlling retrieval breadth and claim caps."""
    FREE = "free"
    PREMIUM = "premium"

    @classmethod
    def from_plan(cls, plan: str) -> 'Tier':
        """Map a subscription plan name onto a tier."""
        if plan and plan.lower() in ('premium', 'pro', 'enterprise'):
            return cls.PREMIUM
        return cls.FREE


def normalize_claim_text(text: str) -> str:
    """Lower-case and collapse whitespace."""
    return " ".join(text.lower().strip().split())


def compute_claim_signature(text: str) -> str:
    """SHA-256 hex digest of the normalized claim text."""
    return hashlib.sha256(normalize_claim_text(text).encode('utf-8')).hexdigest()


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        return datetime.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")


@dataclass(frozen=True)
class Publisher:
    """A known (or ad-hoc) source of evidence with a credibility weight."""
    id: str
    name: str
    weight: float  # 0.0 to 1.0
    region: str
    lang: str
    type: PublisherType
    url: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(f"Publisher weight must be within [0, 1], got {self.weight}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'weight': self.weight,
            'region': self.region,
            'lang': self.lang,
            'type': self.type.value,
            'url': self.url,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Publisher':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            weight=float(data['weight']),
            region=data.get('region', 'global'),
            lang=data.get('lang', 'multi'),
            type=PublisherType(data.get('type', PublisherType.FACT_CHECKER.value)),
            url=data.get('url'),
            description=data.get('description'),
        )


@dataclass(frozen=True)
class Claim:
    """A single checkable assertion; identity is its signature."""
    id: str
    raw_text: str
    canonical_text: str
    language: str
    claim_signature: str
    extraction_confidence: float
    claim_type: ClaimType = ClaimType.FACTUAL

    @classmethod
    def create(cls, text: str, language: str, extraction_confidence: float = 1.0,
               claim_type: ClaimType = ClaimType.FACTUAL, claim_id: Optional[str] = None) -> 'Claim':
        """Build a claim from raw text, deriving the canonical form and signature."""
        canonical = " ".join(text.strip().split())
        return cls(
            id=claim_id or str(uuid.uuid4()),
            raw_text=text,
            canonical_text=canonical,
            language=language,
            claim_signature=compute_claim_signature(canonical),
            extraction_confidence=extraction_confidence,
            claim_type=claim_type,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'raw_text': self.raw_text,
            'canonical_text': self.canonical_text,
            'language': self.language,
            'claim_signature': self.claim_signature,
            'extraction_confidence': self.extraction_confidence,
            'claim_type': self.claim_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Claim':
        return cls(
            id=str(data['id']),
            raw_text=data['raw_text'],
            canonical_text=data['canonical_text'],
            language=data['language'],
            claim_signature=data['claim_signature'],
            extraction_confidence=float(data.get('extraction_confidence', 1.0)),
            claim_type=ClaimType(data.get('claim_type', ClaimType.FACTUAL.value)),
        )


@dataclass(frozen=True)
class Evidence:
    """One external data point bearing on a claim. Immutable once retrieved."""
    id: str
    claim_id: Optional[str]
    source_name: str
    source_url: str
    publisher: Publisher
    snippet: str
    title: str
    stance: Stance
    confidence: float  # 0 to 100
    relevance_score: float  # 0.0 to 1.0
    evidence_type: EvidenceType
    language: str
    published_at: Optional[datetime] = None
    credibility_indicators: Tuple[str, ...] = ()
    fact_check_rating: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 100.0:
            raise ValueError(f"Evidence confidence must be within [0, 100], got {self.confidence}")
        if not 0.0 <= self.relevance_score <= 1.0:
            raise ValueError(f"Evidence relevance must be within [0, 1], got {self.relevance_score}")
        if not isinstance(self.stance, Stance):
            raise ValueError(f"Invalid stance: {self.stance!r}")
        if not isinstance(self.evidence_type, EvidenceType):
            raise ValueError(f"Invalid evidence type: {self.evidence_type!r}")
        if not isinstance(self.credibility_indicators, tuple):
            object.__setattr__(self, 'credibility_indicators', tuple(self.credibility_indicators))

    @property
    def composite_score(self) -> float:
        """Score used to rank key evidence."""
        return (self.confidence * 0.4 +
                self.publisher.weight * 100 * 0.4 +
                self.relevance_score * 100 * 0.2)

    def age_in_days(self, now: datetime) -> Optional[float]:
        if self.published_at is None:
            return None
        published = self.published_at
        if published.tzinfo is not None and now.tzinfo is None:
            published = published.replace(tzinfo=None)
        elif published.tzinfo is None and now.tzinfo is not None:
            now = now.replace(tzinfo=None)
        return (now - published).total_seconds() / 86400.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'claim_id': self.claim_id,
            'source_name': self.source_name,
            'source_url': self.source_url,
            'publisher': self.publisher.to_dict(),
            'snippet': self.snippet,
            'title': self.title,
            'stance': self.stance.value,
            'confidence': self.confidence,
            'relevance_score': self.relevance_score,
            'evidence_type': self.evidence_type.value,
            'language': self.language,
            'published_at': self.published_at.isoformat() if self.published_at else None,
            'credibility_indicators': list(self.credibility_indicators),
            'fact_check_rating': self.fact_check_rating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Evidence':
        """Build evidence from an untrusted dictionary, validating every field."""
        try:
            publisher = data['publisher']
            if isinstance(publisher, dict):
                publisher = Publisher.from_dict(publisher)
            if not isinstance(publisher, Publisher):
                raise ValueError("publisher must be a Publisher or a mapping")
            return cls(
                id=str(data.get('id') or uuid.uuid4()),
                claim_id=data.get('claim_id'),
                source_name=str(data.get('source_name') or publisher.name),
                source_url=str(data.get('source_url') or ''),
                publisher=publisher,
                snippet=str(data.get('snippet') or ''),
                title=str(data.get('title') or ''),
                stance=Stance(data['stance']) if not isinstance(data['stance'], Stance) else data['stance'],
                confidence=float(data['confidence']),
                relevance_score=float(data.get('relevance_score', 0.0)),
                evidence_type=(data['evidence_type'] if isinstance(data['evidence_type'], EvidenceType)
                               else EvidenceType(data['evidence_type'])),
                language=str(data.get('language') or 'en'),
                published_at=_parse_datetime(data.get('published_at')),
                credibility_indicators=tuple(data.get('credibility_indicators') or ()),
                fact_check_rating=data.get('fact_check_rating'),
            )
        except KeyError as e:
            raise ValueError(f"Missing evidence field: {e}") from e
        except TypeError as e:
            raise ValueError(f"Malformed evidence field: {e}") from e


@dataclass(frozen=True)
class ConfidenceFactor:
    """Explainability breakdown of one confidence input."""
    factor_name: str
    score: float
    weight: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'factor_name': self.factor_name,
            'score': self.score,
            'weight': self.weight,
            'description': self.description,
        }


@dataclass(frozen=True)
class EvidenceSummary:
    """Stance counts for an evidence set; total is always the sum of the counts."""
    supporting: int = 0
    refuting: int = 0
    neutral: int = 0
    high_credibility_sources: int = 0
    recent_sources: int = 0

    @property
    def total(self) -> int:
        return self.supporting + self.refuting + self.neutral

    def to_dict(self) -> Dict[str, int]:
        return {
            'supporting': self.supporting,
            'refuting': self.refuting,
            'neutral': self.neutral,
            'total': self.total,
            'high_credibility_sources': self.high_credibility_sources,
            'recent_sources': self.recent_sources,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvidenceSummary':
        return cls(
            supporting=int(data.get('supporting', 0)),
            refuting=int(data.get('refuting', 0)),
            neutral=int(data.get('neutral', 0)),
            high_credibility_sources=int(data.get('high_credibility_sources', 0)),
            recent_sources=int(data.get('recent_sources', 0)),
        )


@dataclass(frozen=True)
class UncertaintyFactor:
    factor: str
    impact: str  # high, medium, low
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {'factor': self.factor, 'impact': self.impact, 'description': self.description}


@dataclass(frozen=True)
class UncertaintyAnalysis:
    factors: Tuple[UncertaintyFactor, ...]
    overall_uncertainty: float
    recommendations: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'factors': [f.to_dict() for f in self.factors],
            'overall_uncertainty': self.overall_uncertainty,
            'recommendations': list(self.recommendations),
        }


@dataclass(frozen=True)
class Verdict:
    """Final classified outcome for a claim."""
    verdict: VerdictLabel
    confidence: int  # 0 to 100
    rationale: Tuple[str, ...]
    evidence_summary: EvidenceSummary
    freshness_date: date
    key_evidence: Tuple[Evidence, ...] = ()
    methodology: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()
    reasoning_steps: Tuple[str, ...] = ()
    confidence_factors: Tuple[ConfidenceFactor, ...] = ()
    uncertainty: Optional[UncertaintyAnalysis] = None
    reasoning_path: str = "rule_based"
    processing_time: float = 0.0

    def __post_init__(self):
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Verdict confidence must be within [0, 100], got {self.confidence}")
        if len(self.key_evidence) > 5:
            raise ValueError("A verdict carries at most 5 key evidence items")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'verdict': self.verdict.value,
            'confidence': self.confidence,
            'rationale': list(self.rationale),
            'evidence_summary': self.evidence_summary.to_dict(),
            'freshness_date': self.freshness_date.isoformat(),
            'key_evidence': [e.to_dict() for e in self.key_evidence],
            'methodology': list(self.methodology),
            'limitations': list(self.limitations),
            'reasoning_steps': list(self.reasoning_steps),
            'confidence_factors': [f.to_dict() for f in self.confidence_factors],
            'uncertainty': self.uncertainty.to_dict() if self.uncertainty else None,
            'reasoning_path': self.reasoning_path,
            'processing_time': self.processing_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Verdict':
        """Rebuild a verdict from storage; uncertainty details are not restored."""
        freshness = data.get('freshness_date')
        if isinstance(freshness, str):
            freshness = date.fromisoformat(freshness[:10])
        return cls(
            verdict=VerdictLabel(data['verdict']),
            confidence=int(round(float(data['confidence']))),
            rationale=tuple(data.get('rationale') or ()),
            evidence_summary=EvidenceSummary.from_dict(data.get('evidence_summary') or {}),
            freshness_date=freshness or date.today(),
            key_evidence=tuple(Evidence.from_dict(e) for e in data.get('key_evidence') or ()),
            methodology=tuple(data.get('methodology') or ()),
            limitations=tuple(data.get('limitations') or ()),
            reasoning_steps=tuple(data.get('reasoning_steps') or ()),
            reasoning_path=data.get('reasoning_path', 'rule_based'),
            processing_time=float(data.get('processing_time', 0.0)),
        )


@dataclass
class ExtractedClaim:
    """A candidate claim as produced by the extractor."""
    text: str
    confidence: float
    claim_type: ClaimType

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'confidence': self.confidence, 'type': self.claim_type.value}


@dataclass
class ExtractionResult:
    claims: List[ExtractedClaim]
    processing_time: float
    method: str
    language: str = "en"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'claims': [c.to_dict() for c in self.claims],
            'processing_time': self.processing_time,
            'method': self.method,
            'language': self.language,
        }


@dataclass
class RetrievalSummary:
    total_sources: int = 0
    fact_checkers: int = 0
    news_sources: int = 0
    government_sources: int = 0
    academic_sources: int = 0
    search_depth: str = "standard"
    real_apis_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_sources': self.total_sources,
            'fact_checkers': self.fact_checkers,
            'news_sources': self.news_sources,
            'government_sources': self.government_sources,
            'academic_sources': self.academic_sources,
            'search_depth': self.search_depth,
            'real_apis_used': self.real_apis_used,
        }


@dataclass
class RetrievalResult:
    """Evidence gathered for one claim."""
    evidence: List[Evidence]
    processing_time: float
    search_queries: List[str]
    summary: RetrievalSummary
    failed_categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'evidence': [e.to_dict() for e in self.evidence],
            'processing_time': self.processing_time,
            'search_queries': list(self.search_queries),
            'summary': self.summary.to_dict(),
            'failed_categories': list(self.failed_categories),
        }


@dataclass
class ClaimResult:
    """Caller-facing result for one claim."""
    claim_id: str
    claim_text: str
    claim_signature: str
    verdict: VerdictLabel
    confidence: int
    rationale: List[str]
    evidence: List[Evidence]
    evidence_summary: EvidenceSummary
    processing_time_ms: float
    methodology: List[str] = field(default_factory=list)
    limitations: List[str] = field(default_factory=list)
    key_evidence: List[Evidence] = field(default_factory=list)
    cached: bool = False
    error: Optional[str] = None

    @classmethod
    def from_verdict(cls, claim: Claim, verdict: Verdict, evidence: List[Evidence],
                     processing_time_ms: float, cached: bool = False) -> 'ClaimResult':
        return cls(
            claim_id=claim.id,
            claim_text=claim.canonical_text,
            claim_signature=claim.claim_signature,
            verdict=verdict.verdict,
            confidence=verdict.confidence,
            rationale=list(verdict.rationale),
            evidence=list(evidence),
            evidence_summary=verdict.evidence_summary,
            processing_time_ms=processing_time_ms,
            methodology=list(verdict.methodology),
            limitations=list(verdict.limitations),
            key_evidence=list(verdict.key_evidence),
            cached=cached,
        )

    @classmethod
    def degraded(cls, claim: Claim, reason: str, processing_time_ms: float = 0.0) -> 'ClaimResult':
        """Result reported when the pipeline failed unexpectedly for a claim."""
        return cls(
            claim_id=claim.id,
            claim_text=claim.canonical_text,
            claim_signature=claim.claim_signature,
            verdict=VerdictLabel.UNVERIFIED,
            confidence=0,
            rationale=[reason],
            evidence=[],
            evidence_summary=EvidenceSummary(),
            processing_time_ms=processing_time_ms,
            limitations=["Verification could not be completed"],
            error=reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'claim_id': self.claim_id,
            'claim_text': self.claim_text,
            'verdict': self.verdict.value,
            'confidence': self.confidence,
            'rationale': list(self.rationale),
            'evidence': [e.to_dict() for e in self.evidence],
            'evidence_summary': self.evidence_summary.to_dict(),
            'key_evidence': [e.to_dict() for e in self.key_evidence],
            'processing_time_ms': self.processing_time_ms,
            'methodology': list(self.methodology),
            'limitations': list(self.limitations),
            'cached': self.cached,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class BatchResult:
    results: List[ClaimResult]
    processing_time_ms: float
    claims_processed: int
    language: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [r.to_dict() for r in self.results],
            'processing_time_ms': self.processing_time_ms,
            'claims_processed': self.claims_processed,
            'language': self.language,
        }
