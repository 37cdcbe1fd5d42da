"""
Live catalog matching.

Scoring used against services fetched from the scoping-data API, where
service type and tag lists are populated:

    input token in name                      +40 once
    service type in input                    +30
    shared description word (> 3 chars)      +10 each
    tag in input                             +15 each
    technology keyword in input and service  +25 each
    complexity equals project complexity     +20
    industry / category overlap              +15

Raw scores are uncapped; only scores strictly above 20 are kept, and the
displayed confidence is capped at 100.
"""

import logging
import re
from typing import List, Sequence

from vsa.models import Service, ServiceMatch, enum_value
from vsa.scope.analysis import detect_complexity, detect_industry
from vsa.text import match_tokens
from vsa.utils import round_half_up

from .base import MAX_CONFIDENCE, ServiceMatcher

logger = logging.getLogger(__name__)

MIN_SCORE_EXCLUSIVE = 20

TECH_KEYWORDS = [
    "firewall", "router", "switch", "network", "security", "cloud", "server",
    "backup", "email", "vpn", "wireless", "azure", "aws", "office 365",
    "active directory", "migration", "storage", "virtualization",
    "monitoring", "exchange",
]

_WORD = re.compile(r"[a-z0-9]+")


def _words(text: str) -> set:
    return {w for w in _WORD.findall((text or "").lower()) if len(w) > 3}


class LiveCatalogMatch(ServiceMatcher):
    """Matcher for services normalized from the live catalog."""

    name = "live"

    def match(self, text: str, catalog: Sequence[Service]) -> List[ServiceMatch]:
        phrase = (text or "").lower().strip()
        complexity = detect_complexity(phrase)
        industry = detect_industry(phrase)
        matches = []

        for service in catalog or []:
            score, keywords = self.score(phrase, service, complexity, industry)
            if score > MIN_SCORE_EXCLUSIVE:
                matches.append(ServiceMatch(
                    service=service,
                    confidence=round_half_up(min(score, MAX_CONFIDENCE)),
                    matched_keywords=keywords,
                ))

        ranked = self.rank(matches)
        logger.info(f"Live matcher: {len(ranked)} of {len(catalog or [])} services matched")
        return ranked

    def score(self, phrase: str, service: Service, complexity: str, industry: str):
        score = 0
        keywords: List[str] = []

        def record(keyword: str) -> None:
            if keyword not in keywords:
                keywords.append(keyword)

        name = service.name.lower()
        if any(token in name for token in match_tokens(phrase)):
            score += 40
            record("name")

        if service.service_type:
            service_type = service.service_type.lower().replace("_", " ")
            if service_type in phrase:
                score += 30
                record("service-type")

        for word in sorted(_words(phrase) & _words(service.description)):
            score += 10
            record(word)

        for tag in service.tags:
            if tag and tag.lower() in phrase:
                score += 15
                record(tag.lower())

        service_text = " ".join([
            name,
            (service.description or "").lower(),
            " ".join(k.lower() for k in service.keywords),
            " ".join(t.lower() for t in service.tags),
        ])
        for keyword in TECH_KEYWORDS:
            if keyword in phrase and keyword in service_text:
                score += 25
                record(keyword)

        if enum_value(service.complexity) == complexity:
            score += 20
            record("complexity")

        category = (service.category or "").lower()
        category_hit = category not in ("", "general") and category in phrase
        industry_hit = industry != "General" and industry.lower() in f"{category} {service_text}"
        if category_hit or industry_hit:
            score += 15
            record("industry")

        logger.debug(f"{service.id}: live score={score} keywords={keywords}")
        return score, keywords


def find_best_service_matches(text: str, catalog: Sequence[Service]) -> List[ServiceMatch]:
    """Rank a live catalog against free text with LiveCatalogMatch."""
    return LiveCatalogMatch().match(text, catalog)
