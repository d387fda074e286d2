"""
Tests for individual rule cascade stages and the evidence statistics behind them.
"""

from claimcheck.core.models import VerdictLabel
from claimcheck.verification.evidence_analysis import (
    analyze_claim_complexity, count_circular_references, detect_context_issues,
    evidence_coherence, quality_adjustment, round_half_up, select_key_evidence,
    summarize_evidence,
)
from claimcheck.verification.rule_cascade import (
    ADVANCED_METHODOLOGY, BASE_METHODOLOGY, CascadeContext, CascadeState, advanced_reasoning, evidence_quality,
    language_penalty, out_of_context, run_cascade, temporal_relevance, weighted_consensus,
)


def make_context(claim, evidence, now, **kwargs):
    return CascadeContext(
        claim=claim,
        evidence=tuple(evidence),
        summary=summarize_evidence(evidence, now),
        language=kwargs.pop('language', 'en'),
        now=now,
        **kwargs
    )


class TestCascadeStages:

    def test_mixed_evidence_overrides_plurality(self, make_evidence, reference_time):
        evidence = [make_evidence('supports', weight=0.5) for _ in range(3)]
        evidence += [make_evidence('refutes', weight=0.5) for _ in range(2)]
        ctx = make_context("Wages increased", evidence, reference_time, require_consensus=False)

        state = weighted_consensus(CascadeState(), ctx)

        assert state.verdict == VerdictLabel.MISLEADING
        assert state.confidence == 65
        assert state.rationale == (
            'Majority of sources support the claim (60.0% weighted support)',
            'Significant evidence both supporting and refuting suggests misleading information',
        )

    def test_consensus_skipped_when_verdict_already_set(self, make_evidence, reference_time):
        evidence = [make_evidence('refutes', weight=0.5) for _ in range(3)]
        ctx = make_context("Wages increased", evidence, reference_time)
        state = CascadeState(verdict=VerdictLabel.TRUE, confidence=80)

        assert weighted_consensus(state, ctx) is state

    def test_out_of_context_from_evidence_keyword(self, make_evidence, reference_time):
        evidence = [make_evidence('neutral', snippet='The quote was shared without context')]
        ctx = make_context("Minister praised the protest", evidence, reference_time)

        state = out_of_context(CascadeState(confidence=55), ctx)

        assert state.verdict == VerdictLabel.OUT_OF_CONTEXT
        assert state.confidence == 70
        assert state.rationale == (
            'Evidence suggests claim is taken out of context',
            'Source mentions potential context issues: "context"',
        )

    def test_out_of_context_never_overrides_false(self, make_evidence, reference_time):
        evidence = [make_evidence('refutes', snippet='A selective reading of the figures')]
        ctx = make_context("Minister praised the protest", evidence, reference_time)
        state = CascadeState(verdict=VerdictLabel.FALSE, confidence=90)

        assert out_of_context(state, ctx) is state

    def test_stale_claim_year(self, reference_time):
        issues = detect_context_issues("Floods destroyed the bridge in 2010", [], reference_time)

        assert issues == ['Claim refers to events from several years ago']
        assert detect_context_issues("Floods destroyed the bridge in 2022", [], reference_time) == []

    def test_temporal_penalty(self, make_evidence, reference_time):
        evidence = [make_evidence(age_days=400), make_evidence(age_days=500), make_evidence(age_days=3)]
        ctx = make_context("Wages increased", evidence, reference_time)

        state = temporal_relevance(CascadeState(confidence=40), ctx)

        assert state.confidence == 30
        assert state.limitations == ('Reliance on potentially outdated information',)

    def test_language_penalty(self, make_evidence, reference_time):
        evidence = [make_evidence(language='en'), make_evidence(language='bn'), make_evidence(language='hi')]
        ctx = make_context("Wages increased", evidence, reference_time, language='en')

        state = language_penalty(CascadeState(confidence=80), ctx)

        assert state.confidence == 70
        assert state.limitations == ('Limited evidence in target language',)


class TestRunCascade:

    def test_advanced_reasoning_steps(self, reference_time):
        claim = "If taxes rise, prices will be higher than last year and wages fall but rents climb"
        ctx = make_context(claim, [], reference_time)

        state = run_cascade(ctx)

        assert state.methodology == BASE_METHODOLOGY + ADVANCED_METHODOLOGY
        assert state.reasoning_steps == (
            'Analyzing 0 pieces of evidence',
            'Applying advanced reasoning patterns',
            'Complex claim detected: multiple sub-claims, conditional statements, comparative elements',
            'Insufficient evidence to make determination',
        )
        assert state.terminal is True

    def test_basic_methodology_without_advanced_reasoning(self, reference_time):
        ctx = make_context("Wages increased", [], reference_time, use_advanced_reasoning=False)

        state = run_cascade(ctx)

        assert state.methodology == BASE_METHODOLOGY
        assert state.confidence == 30

    def test_confidence_stays_in_bounds(self, make_evidence, reference_time):
        evidence = [make_evidence('neutral', weight=0.3, confidence=20, age_days=900, language='ar')
                    for _ in range(4)]
        ctx = make_context("Wages increased", evidence, reference_time)

        state = run_cascade(ctx)

        assert 10 <= state.confidence <= 100
        assert state.verdict == VerdictLabel.UNVERIFIED

    def test_quality_stage_caps_confidence_at_100(self, make_evidence, reference_time):
        evidence = [make_evidence('supports', confidence=95, evidence_type='claimreview',
                                  indicators=('verified_publisher', 'secure_source', 'structured_rating'))
                    for _ in range(3)]
        ctx = make_context("Wages increased", evidence, reference_time)

        state = evidence_quality(CascadeState(confidence=95), ctx)

        assert state.confidence == 100

    def test_advanced_reasoning_never_goes_negative(self, make_evidence, reference_time):
        snippet = 'Officials confirmed the quarterly wage figure'
        evidence = [
            make_evidence('supports', source_name='Daily Ledger', snippet=snippet),
            make_evidence('refutes', source_name='Daily Ledger', snippet=snippet),
            make_evidence('supports', source_name='Metro Wire', snippet=snippet),
            make_evidence('refutes', source_name='Metro Wire', snippet=snippet),
        ]
        ctx = make_context("If wages rose faster than prices, savings would grow", evidence, reference_time)

        state = advanced_reasoning(CascadeState(confidence=10), ctx)

        assert len(state.reasoning_steps) == 4
        assert state.confidence == 0


class TestEvidenceAnalysis:

    def test_complexity_uses_whole_words(self):
        is_complex, factors = analyze_claim_complexity("The brand launched a new handbag")

        assert is_complex is False
        assert factors == []

    def test_coherence_penalizes_contradicting_source(self, make_evidence):
        evidence = [
            make_evidence('supports', source_name='Daily Ledger'),
            make_evidence('refutes', source_name='Daily Ledger'),
        ]

        score, factors = evidence_coherence(evidence)

        assert score == 0.7
        assert factors == ['Contradictory stances from Daily Ledger']

    def test_circular_references(self, make_evidence):
        evidence = [
            make_evidence(source_name='Daily Ledger', snippet='Figures first reported here'),
            make_evidence(source_name='Evening Post', snippet='As the Daily Ledger reported yesterday'),
        ]

        assert count_circular_references(evidence) == 1

    def test_quality_adjustment_bounds(self, make_evidence):
        low = [make_evidence(confidence=30) for _ in range(3)]
        multiplier, factors = quality_adjustment(low)

        assert multiplier == 0.9
        assert factors == ['Lower average confidence across sources']

    def test_key_evidence_for_misleading(self, make_evidence):
        evidence = [make_evidence('supports', confidence=c) for c in (50, 90, 70)]
        evidence += [make_evidence('refutes', confidence=c) for c in (60, 95, 40)]
        evidence.append(make_evidence('neutral', confidence=99))

        selected = select_key_evidence(evidence, VerdictLabel.MISLEADING)

        assert [e.confidence for e in selected] == [95, 90, 70, 60]

    def test_round_half_up(self):
        assert round_half_up(72.5) == 73
        assert round_half_up(55.25) == 55
