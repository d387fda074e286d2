"""
Verdict generation for a claim and its evidence.

Uses the external reasoning capability when one is configured and falls back
to the deterministic rule cascade on any failure. Both paths go through the
same quality checks and uncertainty overlay and return the same ``Verdict``.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..constants import ConfigDefaults, ErrorMessages, LogMessages, VerdictThresholds
from ..core.models import Evidence, EvidenceSummary, Verdict, VerdictLabel
from ..error_handler import ErrorCategory, VerificationError, classify_error
from .evidence_analysis import (
    confidence_factors, round_half_up, select_key_evidence, summarize_evidence,
)
from .prompts import verdict_system_prompt, verdict_user_prompt
from .reasoning_client import ReasoningCapability
from .rule_cascade import CascadeContext, CascadeState, run_cascade
from .uncertainty import analyze_uncertainty, apply_uncertainty

AI_METHODOLOGY = ('AI-powered analysis', 'Multi-source verification')


@dataclass
class VerdictOptions:
    """Per-call switches for verdict generation."""
    use_ai: bool = True
    confidence_threshold: float = ConfigDefaults.CONFIDENCE_THRESHOLD
    require_consensus: bool = True
    weight_by_credibility: bool = True
    use_advanced_reasoning: bool = True
    include_uncertainty: bool = True

    def __post_init__(self):
        if not 0 <= self.confidence_threshold <= 100:
            raise ValueError("confidence_threshold must be within [0, 100]")


def _string_list(value: Any, field_name: str) -> tuple:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"'{field_name}' must be a list of strings")
    return tuple(value)


def parse_reasoning_result(result: Dict[str, Any]) -> CascadeState:
    """Validate a reasoning response into a state; raises ValueError when malformed."""
    verdict = VerdictLabel(result.get('verdict', VerdictLabel.UNVERIFIED.value))

    confidence = result.get('confidence', 50)
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise ValueError("'confidence' must be a number")

    return CascadeState(
        verdict=verdict,
        confidence=max(0.0, min(100.0, float(confidence))),
        rationale=_string_list(result.get('rationale'), 'rationale'),
        limitations=_string_list(result.get('limitations'), 'limitations'),
        reasoning_steps=_string_list(result.get('reasoning_steps'), 'reasoning_steps'),
        methodology=_string_list(result.get('methodology'), 'methodology') or AI_METHODOLOGY,
    )


class VerdictGenerator:
    """
    Produces one immutable ``Verdict`` per claim.

    The rule path is a pure function of the claim, the evidence and the
    reference time ``now``.
    """

    def __init__(self,
                 reasoning_client: Optional[ReasoningCapability] = None,
                 reasoning_timeout: float = ConfigDefaults.REASONING_TIMEOUT,
                 executor: Optional[ThreadPoolExecutor] = None):
        if reasoning_timeout <= 0:
            raise ValueError("reasoning_timeout must be positive")
        self.reasoning_client = reasoning_client
        self.reasoning_timeout = reasoning_timeout
        self.executor = executor
        self.logger = logging.getLogger(__name__)

    @property
    def reasoning_available(self) -> bool:
        return self.reasoning_client is not None

    async def generate_verdict(self, claim_text: str, evidence: List[Evidence], language: str = 'en',
                               options: Optional[VerdictOptions] = None,
                               now: Optional[datetime] = None) -> Verdict:
        start_time = time.time()
        options = options or VerdictOptions()
        now = now or datetime.now()
        evidence = tuple(evidence)
        summary = summarize_evidence(list(evidence), now)

        state = None
        reasoning_path = 'rule_based'
        if options.use_ai and self.reasoning_available:
            state = await self._reason(claim_text, list(evidence), summary, language, options)
            if state is not None:
                reasoning_path = 'ai_assisted'

        if state is None:
            state = run_cascade(CascadeContext(
                claim=claim_text,
                evidence=evidence,
                summary=summary,
                language=language,
                now=now,
                confidence_threshold=options.confidence_threshold,
                require_consensus=options.require_consensus,
                weight_by_credibility=options.weight_by_credibility,
                use_advanced_reasoning=options.use_advanced_reasoning,
            ))

        uncertainty = None
        if not state.terminal:
            state = self._quality_checks(state, summary, options.confidence_threshold)
            if options.include_uncertainty:
                uncertainty = analyze_uncertainty(list(evidence), language, now)
                state = apply_uncertainty(state, uncertainty)
            state = self._threshold_check(state, options.confidence_threshold)

        floor = VerdictThresholds.MIN_CONFIDENCE if reasoning_path == 'rule_based' else 0
        confidence = max(floor, min(VerdictThresholds.MAX_CONFIDENCE, round_half_up(state.confidence)))

        return Verdict(
            verdict=state.verdict,
            confidence=confidence,
            rationale=state.rationale,
            evidence_summary=summary,
            freshness_date=now.date(),
            key_evidence=tuple(select_key_evidence(list(evidence), state.verdict)),
            methodology=state.methodology,
            limitations=state.limitations,
            reasoning_steps=state.reasoning_steps,
            confidence_factors=tuple(confidence_factors(list(evidence), now)),
            uncertainty=uncertainty,
            reasoning_path=reasoning_path,
            processing_time=time.time() - start_time,
        )

    async def _reason(self, claim_text: str, evidence: List[Evidence], summary: EvidenceSummary,
                      language: str, options: VerdictOptions) -> Optional[CascadeState]:
        """Run the external reasoning call; any failure returns None."""
        advanced = options.use_advanced_reasoning
        system_prompt = verdict_system_prompt(language, advanced)
        user_prompt = verdict_user_prompt(claim_text, evidence, summary, language, advanced)

        try:
            result = await asyncio.wait_for(self._complete(system_prompt, user_prompt),
                                            timeout=self.reasoning_timeout)
            if not isinstance(result, dict):
                raise VerificationError(ErrorMessages.MALFORMED_REASONING.format(details="expected a JSON object"),
                                        ErrorCategory.PARSING_ERROR)
            try:
                return parse_reasoning_result(result)
            except ValueError as e:
                raise VerificationError(ErrorMessages.MALFORMED_REASONING.format(details=e),
                                        ErrorCategory.PARSING_ERROR) from e
        except Exception as e:
            error = classify_error(e, "external reasoning")
            self.logger.warning(LogMessages.REASONING_FALLBACK.format(error=error))
            return None

    async def _complete(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        complete = self.reasoning_client.complete
        if asyncio.iscoroutinefunction(complete):
            return await complete(system_prompt, user_prompt)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, complete, system_prompt, user_prompt)

    def _quality_checks(self, state: CascadeState, summary: EvidenceSummary,
                        threshold: float) -> CascadeState:
        if summary.total < VerdictThresholds.MIN_EVIDENCE and state.verdict != VerdictLabel.UNVERIFIED:
            state = replace(state,
                            verdict=VerdictLabel.UNVERIFIED,
                            confidence=min(state.confidence, 40),
                            rationale=('Insufficient evidence for confident determination',) + state.rationale)
            state = state.with_limitations('Minimum evidence threshold not met')

        if summary.high_credibility_sources == 0 and state.confidence > VerdictThresholds.NO_HIGH_CREDIBILITY_CAP:
            state = replace(state, confidence=VerdictThresholds.NO_HIGH_CREDIBILITY_CAP)
            state = state.with_limitations('No high-credibility sources available')

        return self._threshold_check(state, threshold)

    def _threshold_check(self, state: CascadeState, threshold: float) -> CascadeState:
        if state.confidence >= threshold or state.verdict == VerdictLabel.UNVERIFIED:
            return state
        return replace(state,
                       verdict=VerdictLabel.UNVERIFIED,
                       rationale=(_below_threshold(threshold),) + state.rationale)

    def apply_threshold(self, verdict: Verdict, threshold: float) -> Verdict:
        """
        Re-check a finished verdict against another request's threshold.

        Used for cached verdicts, which were produced under the options of the
        request that computed them.
        """
        if verdict.confidence >= threshold or verdict.verdict == VerdictLabel.UNVERIFIED:
            return verdict
        return replace(verdict,
                       verdict=VerdictLabel.UNVERIFIED,
                       rationale=(_below_threshold(threshold),) + verdict.rationale)


def _below_threshold(threshold: float) -> str:
    return f"Confidence below threshold ({threshold:g}%)"
