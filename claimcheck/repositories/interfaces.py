"""
Repository pattern interfaces for verification storage.
Provides a storage-engine agnostic persistence boundary for claims,
evidence, verdicts and analysis metadata.
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..core.models import Claim, Evidence, Verdict


class RepositoryInterface(Protocol):
    """Base protocol for all repository interfaces."""

    @abstractmethod
    def get_connection(self):
        """Get database connection."""
        pass


class VerificationRepositoryInterface(RepositoryInterface):
    """Interface for claim verification storage."""

    @abstractmethod
    def save_claim(self, claim: Claim) -> bool:
        """Store a claim; a claim with the same signature is kept as is."""
        pass

    @abstractmethod
    def get_claim_by_id(self, claim_id: str) -> Optional[Claim]:
        """Get a claim by its id."""
        pass

    @abstractmethod
    def get_claim_by_signature(self, signature: str) -> Optional[Claim]:
        """Get a claim by its content signature."""
        pass

    @abstractmethod
    def save_evidence(self, claim_id: str, evidence: List[Evidence]) -> int:
        """Store evidence for a claim; returns the number of rows written."""
        pass

    @abstractmethod
    def get_evidence(self, claim_id: str) -> List[Evidence]:
        """Get stored evidence for a claim."""
        pass

    @abstractmethod
    def save_verdict(self, claim_id: str, verdict: Verdict) -> bool:
        """Store or replace the verdict for a claim."""
        pass

    @abstractmethod
    def get_verdict(self, claim_id: str) -> Optional[Verdict]:
        """Get the verdict for a claim."""
        pass

    @abstractmethod
    def save_analysis_metadata(self, claim_id: str, metadata: Dict[str, Any]) -> bool:
        """Store methodology, limitations, queries and processing stats."""
        pass

    @abstractmethod
    def get_analysis_metadata(self, claim_id: str) -> Optional[Dict[str, Any]]:
        """Get the latest analysis metadata for a claim."""
        pass

    @abstractmethod
    def lookup_by_signature(self, signature: str) -> Optional[Tuple[Claim, Verdict]]:
        """Get the claim and its verdict for a signature, if a verdict exists."""
        pass
