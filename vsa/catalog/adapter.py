"""
Catalog Adapter.

Validates JSON:API payloads from the scoping-data API and normalizes them
into Service / SubService records:

- services come from the document's "data" array
- subservices come from "included" (type "subservices") or a separate
  payload, joined to services via relationships.service
- phase names come from "included" (type "phases") via relationships.phase
- keywords are extracted from name, tag list, SKU, service type,
  description and subservice names
- complexity is derived from hours (< 20 Low, > 60 High, else Medium)

Nothing downstream of this module sees raw JSON:API shapes.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from vsa.models import CatalogSource, Complexity, ScopeLanguage, Service, SubService
from vsa.text import STOP_WORDS

logger = logging.getLogger(__name__)

SERVICE_ID_PREFIX = "ss-"
SUBSERVICE_ID_PREFIX = "ss-sub-"

LOW_COMPLEXITY_HOURS = 20
HIGH_COMPLEXITY_HOURS = 60

DESCRIPTION_EXCLUDED = {"installation", "configuration", "implementation", "service", "system"}
SUBSERVICE_NAME_EXCLUDED = {"policy", "setup", "config"}


class JsonApiResource(BaseModel):
    """Single JSON:API resource object."""
    id: Union[str, int]
    type: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)
    relationships: Dict[str, Any] = Field(default_factory=dict)

    def related_id(self, name: str) -> Optional[str]:
        """Id of a to-one relationship, as a string."""
        rel = self.relationships.get(name) or {}
        data = rel.get("data") if isinstance(rel, dict) else None
        if isinstance(data, dict) and data.get("id") is not None:
            return str(data["id"])
        return None

    def related_type(self, name: str) -> Optional[str]:
        rel = self.relationships.get(name) or {}
        data = rel.get("data") if isinstance(rel, dict) else None
        if isinstance(data, dict):
            return data.get("type")
        return None


class JsonApiDocument(BaseModel):
    data: List[Dict[str, Any]] = Field(default_factory=list)
    included: List[Dict[str, Any]] = Field(default_factory=list)


def _as_document(payload: Any) -> JsonApiDocument:
    """Accept a JSON:API document, a bare list of resources, or nothing."""
    if payload is None:
        return JsonApiDocument()
    if isinstance(payload, list):
        payload = {"data": payload}
    elif isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        payload = {**payload, "data": [payload["data"]]}
    try:
        return JsonApiDocument.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Catalog payload is not a JSON:API document: {e.error_count()} errors")
        return JsonApiDocument()


def _resources(items: List[Dict[str, Any]], kind: str) -> List[JsonApiResource]:
    resources = []
    for item in items:
        try:
            resources.append(JsonApiResource.model_validate(item))
        except ValidationError:
            logger.warning(f"Skipping invalid {kind} resource: {item!r:.120}")
    return resources


def parse_hours(value: Any) -> float:
    """Hours arrive as decimal strings ("12.0"); unparseable values count as 0."""
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable hours value: {value!r}")
        return 0.0


def complexity_from_hours(hours: Any) -> Complexity:
    hours = parse_hours(hours)
    if hours < LOW_COMPLEXITY_HOURS:
        return Complexity.LOW
    if hours > HIGH_COMPLEXITY_HOURS:
        return Complexity.HIGH
    return Complexity.MEDIUM


def extract_keywords(attributes: Dict[str, Any], subservices: List[JsonApiResource]) -> List[str]:
    """Deduplicated keywords in extraction order."""
    keywords: List[str] = []

    name = attributes.get("name") or ""
    keywords.extend(w for w in name.lower().split() if len(w) > 2 and w not in STOP_WORDS)

    tags = attributes.get("tag-list")
    if isinstance(tags, list):
        keywords.extend(str(tag).lower() for tag in tags)

    sku = attributes.get("sku")
    if sku:
        keywords.extend(part for part in re.split(r"[-_]", str(sku).lower()) if len(part) > 1)

    service_type = attributes.get("service-type")
    if service_type:
        keywords.append(str(service_type).lower().replace("_", " "))

    description = attributes.get("service-description")
    if description:
        words = [
            w for w in str(description).lower().split()
            if len(w) > 4 and w not in DESCRIPTION_EXCLUDED
        ]
        keywords.extend(words[:3])

    for sub in subservices:
        sub_name = sub.attributes.get("name")
        if sub_name:
            words = [
                w for w in str(sub_name).lower().split()
                if len(w) > 3 and w not in SUBSERVICE_NAME_EXCLUDED
            ]
            keywords.extend(words[:2])

    return list(dict.fromkeys(keywords))


def _languages(raw: Any) -> Optional[ScopeLanguage]:
    if not isinstance(raw, dict):
        return None
    return ScopeLanguage(
        out_of_scope=raw.get("out_of_scope"),
        customer_responsibility=raw.get("customer_responsibility"),
    )


def to_subservice(resource: JsonApiResource) -> SubService:
    attrs = resource.attributes
    return SubService(
        id=f"{SUBSERVICE_ID_PREFIX}{resource.id}",
        name=attrs.get("name") or "Unknown Subservice",
        description=attrs.get("service-description") or "No description available",
        estimated_hours=parse_hours(attrs.get("suggested-hours")),
        resource_type=resource.related_type("resource") or "Technical",
        quantity=attrs.get("quantity") or 1,
        minimum_quantity=attrs.get("minimum-quantity") or 1,
        position=attrs.get("position") or 0,
        state=attrs.get("state") or "pending",
        active=attrs.get("active") is not False,
        languages=_languages(attrs.get("languages")),
    )


class CatalogAdapter:
    """
    Normalizes scoping-data API payloads into catalog Services.

    Usage:
        services = CatalogAdapter().to_services(services_payload, subservices_payload)
    """

    def to_services(self, services_payload: Any, subservices_payload: Any = None) -> List[Service]:
        """
        Normalize a services document (and optional subservices payload).

        Args:
            services_payload: JSON:API document from the services endpoint
            subservices_payload: subservices document or list; used when the
                services document carries no included subservices

        Returns:
            Normalized services; invalid resources are skipped
        """
        document = _as_document(services_payload)
        services = _resources(document.data, "service")
        included = _resources(document.included, "included")

        subservices = [r for r in included if r.type == "subservices"]
        if not subservices and subservices_payload is not None:
            subservices = _resources(_as_document(subservices_payload).data, "subservice")

        phases = {
            str(r.id): r.attributes["name"]
            for r in included
            if r.type == "phases" and r.attributes.get("name")
        }

        by_service: Dict[str, List[JsonApiResource]] = {}
        for sub in subservices:
            parent = sub.related_id("service")
            if parent is not None:
                by_service.setdefault(parent, []).append(sub)

        normalized = []
        for resource in services:
            if not resource.attributes:
                logger.warning(f"Service {resource.id} has no attributes, skipping")
                continue
            try:
                normalized.append(self._to_service(resource, by_service.get(str(resource.id), []), phases))
            except ValidationError as e:
                logger.warning(f"Skipping service {resource.id}: {e.error_count()} validation errors")

        logger.info(
            f"Normalized {len(normalized)} services, {len(subservices)} subservices, {len(phases)} phases"
        )
        return normalized

    def _to_service(
        self,
        resource: JsonApiResource,
        subservices: List[JsonApiResource],
        phases: Dict[str, str],
    ) -> Service:
        attrs = resource.attributes
        hours = parse_hours(attrs.get("total-hours")) or parse_hours(attrs.get("suggested-hours"))
        tags = attrs.get("tag-list") if isinstance(attrs.get("tag-list"), list) else []

        phase_id = resource.related_id("phase")
        phase_name = phases.get(phase_id) if phase_id else None

        return Service(
            id=f"{SERVICE_ID_PREFIX}{resource.id}",
            name=attrs.get("name") or "Unknown Service",
            category=attrs.get("service-type") or "General",
            description=attrs.get("service-description") or attrs.get("guidance") or "No description available",
            keywords=extract_keywords(attrs, subservices),
            estimated_hours=hours,
            complexity=complexity_from_hours(hours),
            source=CatalogSource.SCOPESTACK,
            sku=attrs.get("sku"),
            subservices=[to_subservice(sub) for sub in subservices],
            quantity=attrs.get("quantity") or 1,
            minimum_quantity=attrs.get("minimum-quantity") or 1,
            position=attrs.get("position") or 0,
            state=attrs.get("state"),
            service_type=attrs.get("service-type"),
            payment_frequency=attrs.get("payment-frequency"),
            languages=_languages(attrs.get("languages")),
            phase_name=phase_name,
            tags=[str(tag) for tag in tags],
        )


def to_services(services_payload: Any, subservices_payload: Any = None) -> List[Service]:
    """Convenience wrapper around CatalogAdapter.to_services."""
    return CatalogAdapter().to_services(services_payload, subservices_payload)
