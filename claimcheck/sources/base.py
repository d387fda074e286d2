"""
Evidence source categories and the search capability contract.
"""

from abc import abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol


class SourceCategory(Enum):
    """Evidence source families searched in parallel for each claim."""
    FACT_CHECKER = "fact_checker"
    NEWS = "news"
    GOVERNMENT = "government"
    ACADEMIC = "academic"


class SearchCapability(Protocol):
    """
    Anything that can return raw evidence hits for a query.

    Hits are plain dictionaries; the retriever validates them into
    ``Evidence`` records. Recognised keys: ``source_name``, ``source_url``,
    ``title``, ``snippet``, ``published_at``, ``evidence_type``,
    ``publisher`` (a ``Publisher`` or mapping), ``publisher_name``,
    ``stance``, ``confidence``, ``relevance_score``, ``fact_check_rating``
    and ``credibility_indicators``. Missing scores are derived.

    ``search`` may be a plain or an ``async`` method.
    """

    name: str

    @abstractmethod
    def search(self, query: str, language: str, category: str,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        pass
