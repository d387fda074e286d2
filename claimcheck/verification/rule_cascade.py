"""
Deterministic rule cascade for verdict generation.

Each stage takes an immutable ``CascadeState`` and returns a new one. Stages
run in order; a terminal stage skips straight to the final threshold filter.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, List, Tuple

from ..constants import VerdictThresholds
from ..core.models import Evidence, EvidenceSummary, VerdictLabel
from .evidence_analysis import (
    analyze_claim_complexity, count_circular_references, detect_context_issues,
    evidence_coherence, high_credibility_counts, language_consistency, outdated_ratio,
    quality_adjustment, round_half_up, weighted_ratios,
)

BASE_METHODOLOGY = ('Rule-based analysis', 'Multi-factor evaluation')
ADVANCED_METHODOLOGY = ('Advanced reasoning patterns', 'Contextual analysis')


@dataclass(frozen=True)
class CascadeState:
    verdict: VerdictLabel = VerdictLabel.UNVERIFIED
    confidence: float = 50
    rationale: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()
    reasoning_steps: Tuple[str, ...] = ()
    methodology: Tuple[str, ...] = BASE_METHODOLOGY
    terminal: bool = False

    def with_rationale(self, *lines: str) -> 'CascadeState':
        return replace(self, rationale=self.rationale + lines)

    def with_limitations(self, *lines: str) -> 'CascadeState':
        return replace(self, limitations=self.limitations + lines)

    def with_steps(self, *lines: str) -> 'CascadeState':
        return replace(self, reasoning_steps=self.reasoning_steps + lines)


@dataclass(frozen=True)
class CascadeContext:
    """Inputs shared by every stage."""
    claim: str
    evidence: Tuple[Evidence, ...]
    summary: EvidenceSummary
    language: str
    now: datetime
    confidence_threshold: float = 70
    require_consensus: bool = True
    weight_by_credibility: bool = True
    use_advanced_reasoning: bool = True


Stage = Callable[[CascadeState, CascadeContext], CascadeState]


def _bounded(confidence: float) -> float:
    return max(0, min(VerdictThresholds.MAX_CONFIDENCE, confidence))


def advanced_reasoning(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if not ctx.use_advanced_reasoning:
        return state

    state = replace(state, methodology=state.methodology + ADVANCED_METHODOLOGY)
    state = state.with_steps('Applying advanced reasoning patterns')
    confidence = state.confidence

    is_complex, factors = analyze_claim_complexity(ctx.claim)
    if is_complex:
        state = state.with_steps(f"Complex claim detected: {', '.join(factors)}")
        confidence -= 5

    coherence, _ = evidence_coherence(list(ctx.evidence))
    if coherence < 0.7:
        state = state.with_steps(f"Low evidence coherence detected ({coherence * 100:.1f}%)")
        confidence -= 10

    if count_circular_references(list(ctx.evidence)) > 0:
        state = state.with_steps('Circular references detected in evidence sources')
        confidence -= 15

    return replace(state, confidence=_bounded(confidence))


def insufficient_evidence(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if ctx.summary.total >= VerdictThresholds.MIN_EVIDENCE:
        return state
    state = replace(state, verdict=VerdictLabel.UNVERIFIED,
                    confidence=VerdictThresholds.INSUFFICIENT_CONFIDENCE, terminal=True)
    return (state.with_rationale('Insufficient evidence available for verification')
                 .with_limitations('Limited evidence sources')
                 .with_steps('Insufficient evidence to make determination'))


def _is_satire(item: Evidence) -> bool:
    publisher = item.publisher.name.lower()
    return ('satire' in item.title.lower() or
            'parody' in item.snippet.lower() or
            'joke' in item.snippet.lower() or
            'onion' in publisher or
            'babylon' in publisher or
            'satire' in (item.fact_check_rating or '').lower())


def satire_detection(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if not any(_is_satire(item) for item in ctx.evidence):
        return state
    state = replace(state, verdict=VerdictLabel.SATIRE,
                    confidence=VerdictThresholds.SATIRE_CONFIDENCE, terminal=True)
    return (state.with_rationale('Content identified as satirical or parody')
                 .with_steps('Satirical content detected'))


def high_credibility_analysis(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    counts = high_credibility_counts(list(ctx.evidence))
    if counts is None:
        return state
    supporting, refuting, neutral = counts

    if supporting > refuting + neutral:
        state = replace(state, verdict=VerdictLabel.TRUE, confidence=min(95, 75 + supporting * 5))
        return (state.with_rationale(f"{supporting} high-credibility sources support the claim")
                     .with_steps('High-credibility sources provide strong supporting evidence'))
    if refuting > supporting + neutral:
        state = replace(state, verdict=VerdictLabel.FALSE, confidence=min(95, 75 + refuting * 5))
        return (state.with_rationale(f"{refuting} high-credibility sources refute the claim")
                     .with_steps('High-credibility sources provide strong refuting evidence'))
    if supporting > 0 and refuting > 0 and neutral > 0:
        state = replace(state, verdict=VerdictLabel.MISLEADING,
                        confidence=VerdictThresholds.MIXED_HIGH_CREDIBILITY_CONFIDENCE)
        return (state.with_rationale('High-credibility sources show mixed evidence, suggesting misleading information')
                     .with_steps('Mixed evidence from credible sources indicates misleading content'))
    return state


def weighted_consensus(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    """
    Credibility-weighted consensus for claims the high-credibility stage left open.

    The mixed-evidence rule runs last and overrides whatever this stage set
    moments before.
    """
    if state.verdict != VerdictLabel.UNVERIFIED or ctx.summary.total < VerdictThresholds.CONSENSUS_MIN_EVIDENCE:
        return state

    support, refute, neutral = weighted_ratios(list(ctx.evidence), ctx.weight_by_credibility)

    if ctx.require_consensus:
        if support >= VerdictThresholds.CONSENSUS_RATIO:
            state = replace(state, verdict=VerdictLabel.TRUE, confidence=min(95, 60 + support * 40))
            state = (state.with_rationale(f"Strong consensus supporting the claim ({support * 100:.1f}% weighted support)")
                          .with_steps('Strong consensus supporting the claim'))
        elif refute >= VerdictThresholds.CONSENSUS_RATIO:
            state = replace(state, verdict=VerdictLabel.FALSE, confidence=min(95, 60 + refute * 40))
            state = (state.with_rationale(f"Strong consensus refuting the claim ({refute * 100:.1f}% weighted refutation)")
                          .with_steps('Strong consensus refuting the claim'))
    else:
        if support > refute and support > neutral:
            verdict = VerdictLabel.TRUE if support > 0.5 else VerdictLabel.UNVERIFIED
            state = replace(state, verdict=verdict, confidence=min(90, 50 + support * 50))
            state = (state.with_rationale(f"Majority of sources support the claim ({support * 100:.1f}% weighted support)")
                          .with_steps('Majority evidence supports the claim'))
        elif refute > support and refute > neutral:
            verdict = VerdictLabel.FALSE if refute > 0.5 else VerdictLabel.UNVERIFIED
            state = replace(state, verdict=verdict, confidence=min(90, 50 + refute * 50))
            state = (state.with_rationale(f"Majority of sources refute the claim ({refute * 100:.1f}% weighted refutation)")
                          .with_steps('Majority evidence refutes the claim'))

    if support >= VerdictThresholds.MIXED_RATIO and refute >= VerdictThresholds.MIXED_RATIO:
        state = replace(state, verdict=VerdictLabel.MISLEADING, confidence=VerdictThresholds.MIXED_CONFIDENCE)
        state = (state.with_rationale('Significant evidence both supporting and refuting suggests misleading information')
                      .with_steps('Mixed evidence indicates misleading or contextual issues'))

    return state


def out_of_context(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if state.verdict == VerdictLabel.FALSE:
        return state
    issues = detect_context_issues(ctx.claim, list(ctx.evidence), ctx.now)
    if not issues:
        return state
    state = replace(state, verdict=VerdictLabel.OUT_OF_CONTEXT,
                    confidence=max(state.confidence, VerdictThresholds.OUT_OF_CONTEXT_CONFIDENCE))
    return (state.with_rationale('Evidence suggests claim is taken out of context', *issues)
                 .with_steps('Context analysis reveals potential misrepresentation'))


def evidence_quality(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    multiplier, factors = quality_adjustment(list(ctx.evidence))
    state = replace(state, confidence=_bounded(round_half_up(state.confidence * multiplier)))
    return state.with_rationale(*factors)


def temporal_relevance(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if outdated_ratio(list(ctx.evidence), ctx.now) <= 0.5:
        return state
    state = replace(state, confidence=max(30, state.confidence - 15))
    return (state.with_rationale('Some evidence is outdated, reducing confidence')
                 .with_limitations('Reliance on potentially outdated information')
                 .with_steps('Applied temporal relevance penalty'))


def language_penalty(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if language_consistency(list(ctx.evidence), ctx.language) >= VerdictThresholds.LANGUAGE_MATCH_RATIO:
        return state
    state = replace(state, confidence=max(40, state.confidence - 10))
    return state.with_limitations('Limited evidence in target language')


def confidence_threshold(state: CascadeState, ctx: CascadeContext) -> CascadeState:
    if state.confidence >= ctx.confidence_threshold or state.verdict == VerdictLabel.UNVERIFIED:
        return state
    original = state.verdict.value
    state = replace(state, verdict=VerdictLabel.UNVERIFIED,
                    rationale=(f"Confidence below threshold ({ctx.confidence_threshold:g}%), changing verdict "
                               f"from '{original}' to 'unverified'",) + state.rationale)
    return state.with_steps('Applied confidence threshold filter')


STAGES: List[Stage] = [
    advanced_reasoning,
    insufficient_evidence,
    satire_detection,
    high_credibility_analysis,
    weighted_consensus,
    out_of_context,
    evidence_quality,
    temporal_relevance,
    language_penalty,
]


def run_cascade(ctx: CascadeContext, stages: List[Stage] = None) -> CascadeState:
    """Compose the stages left to right and finish with the threshold filter."""
    state = CascadeState().with_steps(f"Analyzing {ctx.summary.total} pieces of evidence")
    for stage in stages if stages is not None else STAGES:
        state = stage(state, ctx)
        if state.terminal:
            break
    state = confidence_threshold(state, ctx)

    confidence = max(VerdictThresholds.MIN_CONFIDENCE, min(VerdictThresholds.MAX_CONFIDENCE, state.confidence))
    return replace(state, confidence=confidence)
