"""
Statistics derived from an evidence set.

Everything here is a pure function of the evidence and a reference time so the
rule cascade stays deterministic.
"""

import math
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..constants import VerdictThresholds
from ..core.models import (
    ConfidenceFactor, Evidence, EvidenceSummary, EvidenceType, Stance, VerdictLabel,
)
from ..core.text_analysis import word_overlap

CONTEXT_KEYWORDS = ['context', 'misleading', 'partial', 'incomplete', 'cherry-picked', 'selective']

_SUB_CLAIM_SPLIT = re.compile(r'\b(?:and|but|however|although|while)\b', re.IGNORECASE)
_CONDITIONAL = re.compile(r'\b(?:if|when|unless|provided that)\b', re.IGNORECASE)
_COMPARATIVE = re.compile(r'\b(?:more than|less than|compared to|versus|higher than|lower than)\b', re.IGNORECASE)
_TIME_REFERENCE = re.compile(r'\b(?:\d{4}|yesterday|today|last year|next year)\b', re.IGNORECASE)
_YEAR = re.compile(r'\b\d{4}\b')


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize_evidence(evidence: List[Evidence], now: datetime) -> EvidenceSummary:
    """Stance counts plus high-credibility (weight > 0.8) and recent (within 7 days) counts."""
    supporting = refuting = neutral = high_credibility = recent = 0
    for item in evidence:
        if item.stance == Stance.SUPPORTS:
            supporting += 1
        elif item.stance == Stance.REFUTES:
            refuting += 1
        else:
            neutral += 1

        if item.publisher.weight > VerdictThresholds.SUMMARY_HIGH_CREDIBILITY_WEIGHT:
            high_credibility += 1

        age = item.age_in_days(now)
        if age is not None and age <= VerdictThresholds.RECENT_DAYS:
            recent += 1

    return EvidenceSummary(
        supporting=supporting,
        refuting=refuting,
        neutral=neutral,
        high_credibility_sources=high_credibility,
        recent_sources=recent,
    )


def confidence_factors(evidence: List[Evidence], now: datetime) -> List[ConfidenceFactor]:
    """Explainability breakdown of the inputs behind a verdict's confidence."""
    count = max(1, len(evidence))

    avg_credibility = sum(e.publisher.weight for e in evidence) / count
    support_ratio = sum(1 for e in evidence if e.stance == Stance.SUPPORTS) / count
    refute_ratio = sum(1 for e in evidence if e.stance == Stance.REFUTES) / count
    consensus = max(support_ratio, refute_ratio)

    recent = 0
    for item in evidence:
        age = item.age_in_days(now)
        if age is not None and age <= VerdictThresholds.RECENCY_FACTOR_DAYS:
            recent += 1
    recency = recent / count

    avg_relevance = sum(e.relevance_score for e in evidence) / count
    unique_publishers = len({e.publisher.id for e in evidence})
    diversity = min(1.0, unique_publishers / 5)

    return [
        ConfidenceFactor('source_credibility', avg_credibility, 0.3,
                         f"Average source credibility: {avg_credibility * 100:.1f}%"),
        ConfidenceFactor('evidence_consensus', consensus, 0.25,
                         f"Evidence consensus: {consensus * 100:.1f}%"),
        ConfidenceFactor('evidence_recency', recency, 0.15,
                         f"Recent evidence: {recency * 100:.1f}%"),
        ConfidenceFactor('relevance', avg_relevance, 0.2,
                         f"Average relevance: {avg_relevance * 100:.1f}%"),
        ConfidenceFactor('source_diversity', diversity, 0.1,
                         f"Source diversity: {unique_publishers} unique sources"),
    ]


def analyze_claim_complexity(claim: str) -> Tuple[bool, List[str]]:
    """Return (is_complex, factors) for a claim's wording."""
    factors = []
    if len(_SUB_CLAIM_SPLIT.split(claim)) > 2:
        factors.append('multiple sub-claims')
    if _CONDITIONAL.search(claim):
        factors.append('conditional statements')
    if _COMPARATIVE.search(claim):
        factors.append('comparative elements')
    if len(_TIME_REFERENCE.findall(claim)) > 2:
        factors.append('multiple time references')
    return bool(factors), factors


def evidence_coherence(evidence: List[Evidence]) -> Tuple[float, List[str]]:
    """
    Coherence score in (0, 1] with the reasons it was lowered.

    Each source reporting both supporting and refuting items costs a factor
    of 0.7; dated evidence spanning more than 1000 days costs 0.9.
    """
    score = 1.0
    factors = []

    by_source: Dict[str, List[Evidence]] = {}
    for item in evidence:
        by_source.setdefault(item.source_name, []).append(item)

    for source, items in by_source.items():
        stances = {item.stance for item in items}
        if len(items) > 1 and Stance.SUPPORTS in stances and Stance.REFUTES in stances:
            score *= 0.7
            factors.append(f"Contradictory stances from {source}")

    dated = [item.published_at.replace(tzinfo=None) for item in evidence if item.published_at]
    if len(dated) > 1:
        span_days = (max(dated) - min(dated)).total_seconds() / 86400.0
        if span_days > 1000:
            score *= 0.9
            factors.append('Evidence spans a very long time period')

    return score, factors


def count_circular_references(evidence: List[Evidence]) -> int:
    """Pairs of items that cite each other or share near-identical snippets."""
    count = 0
    for i, first in enumerate(evidence):
        for second in evidence[i + 1:]:
            if ((second.source_name and second.source_name in first.snippet) or
                    (first.source_name and first.source_name in second.snippet)):
                count += 1
            if word_overlap(first.snippet, second.snippet) > 0.8:
                count += 1
    return count


def detect_context_issues(claim: str, evidence: List[Evidence], now: datetime) -> List[str]:
    issues = []
    for item in evidence:
        text = f"{item.title} {item.snippet}".lower()
        for keyword in CONTEXT_KEYWORDS:
            if keyword in text:
                issues.append(f'Source mentions potential context issues: "{keyword}"')
                break

    match = _YEAR.search(claim)
    if match and now.year - int(match.group()) > VerdictThresholds.STALE_CLAIM_YEARS:
        issues.append('Claim refers to events from several years ago')

    return issues


def quality_adjustment(evidence: List[Evidence]) -> Tuple[float, List[str]]:
    """Confidence multiplier in [0.5, 1.3] and the rationale lines behind it."""
    multiplier = 1.0
    factors = []

    if any(e.evidence_type == EvidenceType.CLAIMREVIEW for e in evidence):
        multiplier += 0.1
        factors.append('Professional fact-checking sources available')

    if any(e.evidence_type == EvidenceType.KB for e in evidence):
        multiplier += 0.05
        factors.append('Knowledge base sources provide additional context')

    count = max(1, len(evidence))
    avg_indicators = sum(len(e.credibility_indicators) for e in evidence) / count
    if avg_indicators > 2:
        multiplier += 0.05
        factors.append('Sources have strong credibility indicators')

    avg_confidence = sum(e.confidence for e in evidence) / count
    if avg_confidence > 80:
        multiplier += 0.1
        factors.append('High average confidence across sources')
    elif avg_confidence < 60:
        multiplier -= 0.1
        factors.append('Lower average confidence across sources')

    return max(0.5, min(1.3, multiplier)), factors


def outdated_ratio(evidence: List[Evidence], now: datetime) -> float:
    """Share of dated evidence older than a year; undated items are ignored."""
    ages = [age for age in (e.age_in_days(now) for e in evidence) if age is not None]
    if not ages:
        return 0.0
    return sum(1 for age in ages if age > VerdictThresholds.OUTDATED_DAYS) / len(ages)


def language_consistency(evidence: List[Evidence], language: str) -> float:
    if not evidence:
        return 0.0
    return sum(1 for e in evidence if e.language == language) / len(evidence)


def select_key_evidence(evidence: List[Evidence], verdict: VerdictLabel,
                        limit: int = 5) -> List[Evidence]:
    """Pick the items that best explain the verdict, ranked by composite score."""
    def ranked(items: List[Evidence]) -> List[Evidence]:
        return sorted(items, key=lambda e: e.composite_score, reverse=True)

    if verdict == VerdictLabel.TRUE:
        selected = [e for e in evidence if e.stance == Stance.SUPPORTS]
    elif verdict == VerdictLabel.FALSE:
        selected = [e for e in evidence if e.stance == Stance.REFUTES]
    elif verdict == VerdictLabel.MISLEADING:
        selected = (ranked([e for e in evidence if e.stance == Stance.SUPPORTS])[:2] +
                    ranked([e for e in evidence if e.stance == Stance.REFUTES])[:2])
    else:
        selected = list(evidence)

    return ranked(selected)[:limit]


def high_credibility_counts(evidence: List[Evidence]) -> Optional[Tuple[int, int, int]]:
    """(supporting, refuting, neutral) among items with weight >= 0.85, or None if fewer than two."""
    credible = [e for e in evidence if e.publisher.weight >= VerdictThresholds.HIGH_CREDIBILITY_WEIGHT]
    if len(credible) < 2:
        return None
    return (sum(1 for e in credible if e.stance == Stance.SUPPORTS),
            sum(1 for e in credible if e.stance == Stance.REFUTES),
            sum(1 for e in credible if e.stance == Stance.NEUTRAL))


def weighted_ratios(evidence: List[Evidence], weight_by_credibility: bool) -> Tuple[float, float, float]:
    """Credibility-weighted (support, refute, neutral) ratios."""
    totals = {Stance.SUPPORTS: 0.0, Stance.REFUTES: 0.0, Stance.NEUTRAL: 0.0}
    total_weight = 0.0
    for item in evidence:
        weight = item.publisher.weight if weight_by_credibility else 1.0
        totals[item.stance] += weight
        total_weight += weight

    if total_weight <= 0:
        return 0.0, 0.0, 0.0
    return (totals[Stance.SUPPORTS] / total_weight,
            totals[Stance.REFUTES] / total_weight,
            totals[Stance.NEUTRAL] / total_weight)
