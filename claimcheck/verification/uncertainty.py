"""
Uncertainty overlay applied after a verdict has been reached.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, List

from ..core.models import Evidence, Stance, UncertaintyAnalysis, UncertaintyFactor, VerdictLabel
from .evidence_analysis import round_half_up
from .rule_cascade import CascadeState

IMPACT_WEIGHTS: Dict[str, float] = {'high': 0.3, 'medium': 0.2, 'low': 0.1}

RECOMMENDATIONS: Dict[str, str] = {
    'insufficient_evidence': 'Seek additional evidence sources before making final determination',
    'low_quality_evidence': 'Prioritize higher-quality, more credible sources',
    'temporal_uncertainty': 'Look for more recent evidence to confirm current status',
    'conflicting_evidence': 'Investigate the source of conflicting information',
}


def analyze_uncertainty(evidence: List[Evidence], language: str, now: datetime) -> UncertaintyAnalysis:
    """Detect uncertainty factors and combine them into a score in [0, 1]."""
    factors: List[UncertaintyFactor] = []
    count = len(evidence)

    if count < 3:
        factors.append(UncertaintyFactor('insufficient_evidence', 'high',
                                         'Limited number of evidence sources'))

    low_quality = sum(1 for e in evidence if e.confidence < 60)
    if low_quality > count * 0.3:
        factors.append(UncertaintyFactor('low_quality_evidence', 'medium',
                                         'Significant portion of evidence has low confidence'))

    old = 0
    for item in evidence:
        age = item.age_in_days(now)
        if age is not None and age > 365:
            old += 1
    if old > count * 0.5:
        factors.append(UncertaintyFactor('temporal_uncertainty', 'medium',
                                         'Much of the evidence is over a year old'))

    mismatched = sum(1 for e in evidence if e.language != language)
    if mismatched > count * 0.4:
        factors.append(UncertaintyFactor('language_uncertainty', 'low',
                                         'Evidence from different language contexts'))

    supporting = sum(1 for e in evidence if e.stance == Stance.SUPPORTS)
    refuting = sum(1 for e in evidence if e.stance == Stance.REFUTES)
    if supporting > 0 and refuting > 0 and abs(supporting - refuting) <= 1:
        factors.append(UncertaintyFactor('conflicting_evidence', 'high',
                                         'Nearly equal supporting and refuting evidence'))

    overall = min(1.0, sum(IMPACT_WEIGHTS[f.impact] for f in factors))

    recommendations: List[str] = []
    for factor in factors:
        recommendation = RECOMMENDATIONS.get(factor.factor)
        if recommendation and recommendation not in recommendations:
            recommendations.append(recommendation)

    return UncertaintyAnalysis(
        factors=tuple(factors),
        overall_uncertainty=overall,
        recommendations=tuple(recommendations),
    )


def apply_uncertainty(state: CascadeState, analysis: UncertaintyAnalysis) -> CascadeState:
    """Scale confidence by (1 - u/2) with a floor of 10; u > 0.6 forces unverified."""
    uncertainty = analysis.overall_uncertainty
    confidence = max(10, round_half_up(state.confidence * (1 - uncertainty * 0.5)))
    rationale = state.rationale
    limitations = state.limitations
    verdict = state.verdict

    if uncertainty > 0.3:
        rationale = (f"High uncertainty detected ({uncertainty * 100:.1f}%)",) + rationale
        limitations = limitations + analysis.recommendations

    if uncertainty > 0.6 and verdict != VerdictLabel.UNVERIFIED:
        rationale = ('High uncertainty led to unverified classification',) + rationale
        verdict = VerdictLabel.UNVERIFIED

    return replace(state, verdict=verdict, confidence=confidence,
                   rationale=rationale, limitations=limitations)
