"""
Plain-text catalog matching.

Weighted substring scoring of input tokens against each catalog service:

    exact name (input and name contain one another)   +100, "exact-name"
    token in name                                      +50 per token
    token in SKU                                       +40 once, "sku-match"
    token in keyword                                   +30 per (token, keyword)
    token in description                               +20 per token
    token in category                                  +25 per token, "category"
    token in phase name                                +25 once, "phase-name"

Services with a raw score below 20 are dropped.
"""

import logging
from typing import List, Sequence

from vsa.models import Service, ServiceMatch
from vsa.text import match_tokens
from vsa.utils import round_half_up

from .base import MAX_CONFIDENCE, ServiceMatcher

logger = logging.getLogger(__name__)

MIN_SCORE = 20


class CatalogTextMatch(ServiceMatcher):
    """Matcher for the static or normalized catalog."""

    name = "text"

    def match(self, text: str, catalog: Sequence[Service]) -> List[ServiceMatch]:
        phrase = (text or "").lower().strip()
        tokens = match_tokens(phrase)
        matches = []

        logger.debug(f"Matching {len(catalog or [])} services against tokens {tokens}")

        for service in catalog or []:
            score, keywords = self.score(phrase, tokens, service)
            if score >= MIN_SCORE:
                matches.append(ServiceMatch(
                    service=service,
                    confidence=round_half_up(min(score, MAX_CONFIDENCE)),
                    matched_keywords=keywords,
                ))

        ranked = self.rank(matches)
        logger.info(f"Text matcher: {len(ranked)} of {len(catalog or [])} services matched")
        return ranked

    def score(self, phrase: str, tokens: List[str], service: Service):
        """Raw score and deduplicated matched keywords for one service."""
        score = 0
        keywords: List[str] = []

        def record(keyword: str) -> None:
            if keyword not in keywords:
                keywords.append(keyword)

        name = service.name.lower()
        if phrase and (phrase in name or name in phrase):
            score += 100
            record("exact-name")

        for token in tokens:
            if token in name:
                score += 50
                record(token)

        if service.sku and any(token in service.sku.lower() for token in tokens):
            score += 40
            record("sku-match")

        for token in tokens:
            for keyword in service.keywords:
                if token in keyword.lower():
                    score += 30
                    record(keyword)

        description = (service.description or "").lower()
        if description:
            score += 20 * sum(1 for token in tokens if token in description)

        category = (service.category or "").lower()
        for token in tokens:
            if token in category:
                score += 25
                record("category")

        if service.phase_name and any(token in service.phase_name.lower() for token in tokens):
            score += 25
            record("phase-name")

        logger.debug(f"{service.id}: score={score} keywords={keywords}")
        return score, keywords


def match_services(text: str, catalog: Sequence[Service]) -> List[ServiceMatch]:
    """Rank a catalog against free text with CatalogTextMatch."""
    return CatalogTextMatch().match(text, catalog)
