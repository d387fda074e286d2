"""
Coverage scoring strategies for the publisher directory source.

A strategy decides whether a directory publisher has something to say about
a query and, if so, with which stance, confidence, relevance and age.
"""

import random
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.models import Publisher, PublisherType, Stance
from .credibility import publisher_confidence

# Probability that a publisher category has coverage for a query
COVERAGE_PROBABILITY: Dict[str, float] = {
    'fact_checker': 0.6,
    'news': 0.7,
    'government': 0.5,
    'academic': 0.4,
}

STATISTICAL_CLAIM = re.compile(r'\d+%|\$\d+|statistics|data')
DEBUNK_CLAIM = re.compile(r'false|fake|hoax|misinformation')


@dataclass(frozen=True)
class CoverageScore:
    stance: Stance
    confidence: float
    relevance: float
    age_days: float


class ScoringStrategy(ABC):
    """Decides directory coverage for one publisher and query."""

    @abstractmethod
    def score(self, publisher: Publisher, query: str, category: str) -> Optional[CoverageScore]:
        """Return the coverage found, or None when the publisher has nothing on the query."""
        pass


class FixedScoringStrategy(ScoringStrategy):
    """
    Deterministic strategy: every publisher has coverage with fixed values.

    ``stances`` maps publisher ids to a stance and overrides the default.
    A ``confidence`` of None uses the publisher's own confidence rule.
    """

    def __init__(self, stance: Stance = Stance.NEUTRAL, confidence: Optional[float] = None,
                 relevance: float = 0.9, age_days: float = 1.0,
                 stances: Optional[Dict[str, Stance]] = None, covered: bool = True):
        self.stance = stance
        self.confidence = confidence
        self.relevance = relevance
        self.age_days = age_days
        self.stances = stances or {}
        self.covered = covered

    def score(self, publisher: Publisher, query: str, category: str) -> Optional[CoverageScore]:
        if not self.covered:
            return None
        stance = self.stances.get(publisher.id, self.stance)
        confidence = self.confidence if self.confidence is not None else publisher_confidence(publisher, stance)
        return CoverageScore(stance=stance, confidence=confidence,
                             relevance=self.relevance, age_days=self.age_days)


class StochasticScoringStrategy(ScoringStrategy):
    """
    Randomised coverage simulating live publisher searches.

    Uses its own ``random.Random`` so a seed reproduces a run exactly.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def score(self, publisher: Publisher, query: str, category: str) -> Optional[CoverageScore]:
        if self.rng.random() >= COVERAGE_PROBABILITY.get(category, 0.5):
            return None

        stance = self._stance(publisher, query)

        if category == 'news':
            confidence = 70 + self.rng.random() * 25
            relevance = 0.7 + self.rng.random() * 0.3
            age_days = self.rng.random() * 30
        elif category == 'government':
            confidence = 85 + self.rng.random() * 10
            relevance = 0.8 + self.rng.random() * 0.2
            age_days = self.rng.random() * 30
        elif category == 'academic':
            confidence = 80 + self.rng.random() * 15
            relevance = 0.75 + self.rng.random() * 0.25
            age_days = self.rng.random() * 365
        else:
            confidence = publisher_confidence(publisher, stance)
            relevance = 0.8 + self.rng.random() * 0.2
            age_days = self.rng.random() * 30

        return CoverageScore(stance=stance, confidence=min(100.0, confidence),
                             relevance=min(1.0, relevance), age_days=age_days)

    def _random_stance(self) -> Stance:
        return self.rng.choice([Stance.SUPPORTS, Stance.REFUTES, Stance.NEUTRAL])

    def _stance(self, publisher: Publisher, query: str) -> Stance:
        lowered = query.lower()

        if publisher.type == PublisherType.GOVERNMENT:
            if STATISTICAL_CLAIM.search(lowered):
                return Stance.SUPPORTS if self.rng.random() > 0.3 else Stance.NEUTRAL
            return Stance.NEUTRAL

        if publisher.type == PublisherType.FACT_CHECKER:
            if DEBUNK_CLAIM.search(lowered):
                return Stance.REFUTES
            if self.rng.random() > 0.4:
                return Stance.SUPPORTS
            return Stance.REFUTES if self.rng.random() > 0.5 else Stance.NEUTRAL

        if publisher.type == PublisherType.ACADEMIC:
            if self.rng.random() > 0.6:
                return Stance.NEUTRAL
            return Stance.SUPPORTS if self.rng.random() > 0.5 else Stance.REFUTES

        return self._random_stance()
