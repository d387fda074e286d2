"""
Claim verification pipeline.

Extracts checkable claims from text, gathers evidence from fact checkers,
news, government and academic sources, and produces an explainable verdict
for each claim.
"""

from .api import ClaimCheckAPI, create_claimcheck_api
from .config import PipelineConfig, TierSettings
from .core.models import BatchResult, ClaimResult, Tier, VerdictLabel
from .verification.verdict_generator import VerdictOptions

__version__ = "1.0.0"
__all__ = [
    # Main API
    "ClaimCheckAPI",
    "create_claimcheck_api",

    # Configuration
    "PipelineConfig",
    "TierSettings",
    "VerdictOptions",

    # Data models
    "BatchResult",
    "ClaimResult",
    "Tier",
    "VerdictLabel",
]
