"""
Service matcher capability.

Both matching strategies score a catalog against free text and return
ServiceMatch records sorted by confidence, capped at MAX_MATCHES.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from vsa.models import Service, ServiceMatch

MAX_MATCHES = 8
MAX_CONFIDENCE = 100


class ServiceMatcher(ABC):
    """Scores catalog services against a project description."""

    name: str = "base"

    @abstractmethod
    def match(self, text: str, catalog: Sequence[Service]) -> List[ServiceMatch]:
        """
        Rank catalog services for a description.

        Args:
            text: Free-text project description
            catalog: Normalized catalog services

        Returns:
            At most MAX_MATCHES matches, confidence descending
        """

    @staticmethod
    def rank(matches: List[ServiceMatch]) -> List[ServiceMatch]:
        """Stable sort by confidence descending, truncated to MAX_MATCHES."""
        return sorted(matches, key=lambda m: m.confidence, reverse=True)[:MAX_MATCHES]
