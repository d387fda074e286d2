"""
Verdict generation: rule cascade, uncertainty overlay and external reasoning.
"""

from .evidence_analysis import confidence_factors, select_key_evidence, summarize_evidence
from .reasoning_client import OpenAIReasoningClient, ReasoningCapability, create_reasoning_client
from .rule_cascade import CascadeContext, CascadeState, STAGES, run_cascade
from .uncertainty import analyze_uncertainty, apply_uncertainty
from .verdict_generator import VerdictGenerator, VerdictOptions, parse_reasoning_result

__all__ = [
    "confidence_factors",
    "select_key_evidence",
    "summarize_evidence",
    "OpenAIReasoningClient",
    "ReasoningCapability",
    "create_reasoning_client",
    "CascadeContext",
    "CascadeState",
    "STAGES",
    "run_cascade",
    "analyze_uncertainty",
    "apply_uncertainty",
    "VerdictGenerator",
    "VerdictOptions",
    "parse_reasoning_result",
]
