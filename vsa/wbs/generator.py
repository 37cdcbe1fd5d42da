"""
WBS Generator.

Expands selected service matches into a phase -> service -> subservice ->
deliverable plan with hours, cost, risk and timeline.

Per service:
- predefined breakdown (BreakdownLibrary) when the service id has one
- otherwise the catalog subservices 1:1, each with one deliverable worth 20%
- otherwise a synthetic Planning (20%) / Implementation (70%) /
  Testing & Documentation (10%) chain

A Project Management & Coordination phase worth 15% of the other phases is
prepended whenever any phase exists.
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from vsa.models import (
    HOURLY_RATES,
    RISK_ORDER,
    Complexity,
    ResourceType,
    RiskLevel,
    Service,
    ServiceMatch,
    WBSDeliverable,
    WBSPhase,
    WBSRiskSummary,
    WBSService,
    WBSSubService,
    WBSSummary,
    WorkBreakdownStructure,
    enum_value,
    hourly_rate,
    is_known_resource_type,
)
from vsa.utils import ceil_div, round_half_up

from .breakdowns import BreakdownLibrary, BreakdownTemplate, default_library

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_HOURS = 40
HOURS_PER_WEEK = 40
HOURS_PER_PERSON_MONTH = 160
PM_OVERHEAD_RATIO = 0.15

PM_PHASE_ID = "phase-pm"
PM_PHASE_NAME = "Project Management & Coordination"
PM_MILESTONES = ["Project Kickoff", "Mid-Project Review", "Project Closure"]

EMPTY_WBS_ID = "empty-wbs"

ASSUMPTIONS = [
    "Client will provide necessary access and resources",
    "No major scope changes during implementation",
    "Standard business hours for implementation",
]

_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lowercase and replace whitespace runs with '-'."""
    return _WHITESPACE.sub("-", name.lower())


def risk_from_complexity(complexity: Any) -> RiskLevel:
    return RiskLevel(enum_value(complexity))


def highest_risk(levels: Sequence[Any], default: RiskLevel = RiskLevel.LOW) -> RiskLevel:
    values = [enum_value(level) for level in levels]
    if not values:
        return default
    return RiskLevel(max(values, key=lambda v: RISK_ORDER[v]))


def subservice_cost(subservice: WBSSubService) -> int:
    return subservice.estimated_hours * hourly_rate(subservice.resource_type)


class WBSGenerator:
    """
    Builds a WorkBreakdownStructure from selected service matches.

    The generator holds no per-call state; generate() can be called
    repeatedly and from multiple threads.
    """

    def __init__(self, breakdowns: Optional[BreakdownLibrary] = None):
        self.breakdowns = breakdowns if breakdowns is not None else default_library()

    # ------------------------------------------------------------------
    # Input validation
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_match(item: Any) -> Optional[ServiceMatch]:
        """ServiceMatch for a match-like item, or None when unusable."""
        if isinstance(item, ServiceMatch):
            match = item
        elif isinstance(item, Service):
            match = ServiceMatch(service=item, confidence=100)
        elif isinstance(item, dict):
            try:
                match = ServiceMatch.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping invalid service match: {e.error_count()} validation errors")
                return None
        else:
            return None

        service = match.service
        if service is None or not service.id or not service.name:
            return None
        return match

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def _expand_template(self, template: BreakdownTemplate) -> List[WBSService]:
        services = []
        for service_data in template.services:
            subservices = [
                WBSSubService(
                    id=f"subservice-{slugify(sub.name)}",
                    name=sub.name,
                    description=sub.description,
                    estimated_hours=sub.hours,
                    deliverables=[
                        WBSDeliverable(
                            id=f"deliverable-{slugify(d.name)}",
                            name=d.name,
                            description=d.description,
                            estimated_hours=d.hours,
                            dependencies=[],
                            risk_level=d.risk_level,
                        )
                        for d in sub.deliverables
                    ],
                    resource_type=sub.resource_type,
                    complexity=Complexity.MEDIUM,
                )
                for sub in service_data.subservices
            ]

            if subservices:
                hours = sum(s.estimated_hours for s in subservices)
                cost = sum(subservice_cost(s) for s in subservices)
            else:
                hours = service_data.hours
                cost = hours * hourly_rate(service_data.resource_type)

            services.append(WBSService(
                id=f"service-{slugify(service_data.name)}",
                name=service_data.name,
                description=service_data.description,
                estimated_hours=hours,
                total_cost=cost,
                subservices=subservices,
                resource_type=service_data.resource_type,
                complexity=Complexity.MEDIUM,
                risk_level=RiskLevel.MEDIUM,
            ))
        return services

    def _expand_catalog_subservices(
        self, service: Service, hours: Any, resource_type: ResourceType
    ) -> List[WBSSubService]:
        count = len(service.subservices)
        even_split = round_half_up(hours / count)
        subservices = []

        for sub in service.subservices:
            sub_hours = sub.estimated_hours or even_split
            sub_type = sub.resource_type if is_known_resource_type(sub.resource_type) else resource_type
            subservices.append(WBSSubService(
                id=sub.id,
                name=sub.name,
                description=sub.description,
                estimated_hours=sub_hours,
                deliverables=[
                    WBSDeliverable(
                        id=f"deliverable-{sub.id}",
                        name=f"{sub.name} Deliverable",
                        description=f"Completion of {sub.name}",
                        estimated_hours=round_half_up(sub_hours * 0.2),
                        dependencies=[],
                        risk_level=RiskLevel.MEDIUM,
                    )
                ],
                resource_type=ResourceType(enum_value(sub_type)),
                complexity=service.complexity,
            ))
        return subservices

    def _synthesize_subservices(
        self, service: Service, hours: Any, resource_type: ResourceType
    ) -> List[WBSSubService]:
        planning_id = f"{service.id}-planning-deliverable"
        implementation_id = f"{service.id}-implementation-deliverable"
        high = enum_value(service.complexity) == Complexity.HIGH.value

        return [
            WBSSubService(
                id=f"{service.id}-planning",
                name=f"{service.name} Planning",
                description=f"Planning and preparation for {service.name}",
                estimated_hours=round_half_up(hours * 0.2),
                deliverables=[
                    WBSDeliverable(
                        id=planning_id,
                        name=f"{service.name} Plan",
                        description=f"Detailed implementation plan for {service.name}",
                        estimated_hours=round_half_up(hours * 0.1),
                        dependencies=[],
                        risk_level=RiskLevel.LOW,
                    )
                ],
                resource_type=ResourceType.PROJECT_MANAGEMENT,
                complexity=service.complexity,
            ),
            WBSSubService(
                id=f"{service.id}-implementation",
                name=f"{service.name} Implementation",
                description=f"Core implementation of {service.name}",
                estimated_hours=round_half_up(hours * 0.7),
                deliverables=[
                    WBSDeliverable(
                        id=implementation_id,
                        name=f"{service.name} Implementation",
                        description=f"Completed implementation of {service.name}",
                        estimated_hours=round_half_up(hours * 0.1),
                        dependencies=[planning_id],
                        risk_level=RiskLevel.HIGH if high else RiskLevel.MEDIUM,
                    )
                ],
                resource_type=resource_type,
                complexity=service.complexity,
            ),
            WBSSubService(
                id=f"{service.id}-testing",
                name=f"{service.name} Testing & Documentation",
                description=f"Testing and documentation for {service.name}",
                estimated_hours=round_half_up(hours * 0.1),
                deliverables=[
                    WBSDeliverable(
                        id=f"{service.id}-testing-deliverable",
                        name=f"{service.name} Documentation",
                        description=f"Complete documentation and testing results for {service.name}",
                        estimated_hours=round_half_up(hours * 0.05),
                        dependencies=[implementation_id],
                        risk_level=RiskLevel.LOW,
                    )
                ],
                resource_type=ResourceType.TECHNICAL,
                complexity=Complexity.LOW,
            ),
        ]

    def _expand_service(self, service: Service) -> WBSService:
        hours = service.estimated_hours or DEFAULT_SERVICE_HOURS
        high = enum_value(service.complexity) == Complexity.HIGH.value
        resource_type = ResourceType.SPECIALIST if high else ResourceType.TECHNICAL

        if service.subservices:
            subservices = self._expand_catalog_subservices(service, hours, resource_type)
        else:
            subservices = self._synthesize_subservices(service, hours, resource_type)

        return WBSService(
            id=f"service-{slugify(service.name)}",
            name=service.name,
            description=service.description or "No description available",
            estimated_hours=sum(s.estimated_hours for s in subservices),
            total_cost=sum(subservice_cost(s) for s in subservices),
            subservices=subservices,
            resource_type=resource_type,
            complexity=service.complexity,
            risk_level=risk_from_complexity(service.complexity),
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    @staticmethod
    def _phase_name(service: Service, index: int) -> str:
        if service.phase_name:
            return service.phase_name
        return f"Phase {index + 1}: {service.name}"

    def _build_pm_phase(self, pm_hours: int, total_hours: Any) -> WBSPhase:
        status_hours = round_half_up(pm_hours * 0.3)
        risk_hours = round_half_up(pm_hours * 0.2)
        # Quality assurance takes the remainder so the phase sums exactly
        qa_hours = pm_hours - status_hours - risk_hours
        pm_cost = pm_hours * HOURLY_RATES[ResourceType.PROJECT_MANAGEMENT.value]

        items = [
            ("pm-status-reports", "Weekly Status Reports",
             "Regular project status updates and milestone tracking", status_hours, RiskLevel.LOW),
            ("pm-risk-management", "Risk Management",
             "Ongoing risk identification and mitigation", risk_hours, RiskLevel.MEDIUM),
            ("pm-quality-assurance", "Quality Assurance",
             "Quality reviews and deliverable validation", qa_hours, RiskLevel.LOW),
        ]
        subservices = [
            WBSSubService(
                id=sub_id,
                name=name,
                description=description,
                estimated_hours=hours,
                deliverables=[
                    WBSDeliverable(
                        id=f"{sub_id}-deliverable",
                        name=name,
                        description=description,
                        estimated_hours=hours,
                        dependencies=[],
                        risk_level=risk,
                    )
                ],
                resource_type=ResourceType.PROJECT_MANAGEMENT,
                complexity=Complexity.MEDIUM,
            )
            for sub_id, name, description, hours, risk in items
        ]

        coordination = WBSService(
            id="pm-coordination",
            name="Project Coordination",
            description="Daily project management and stakeholder communication",
            estimated_hours=pm_hours,
            total_cost=pm_cost,
            subservices=subservices,
            resource_type=ResourceType.PROJECT_MANAGEMENT,
            complexity=Complexity.MEDIUM,
            risk_level=RiskLevel.LOW,
        )

        return WBSPhase(
            id=PM_PHASE_ID,
            name=PM_PHASE_NAME,
            description="Overall project coordination, stakeholder management, and quality assurance",
            start_week=1,
            duration=max(ceil_div(total_hours, HOURS_PER_WEEK), 1),
            services=[coordination],
            total_hours=pm_hours,
            total_cost=pm_cost,
            risk_level=RiskLevel.LOW,
            dependencies=[],
            milestones=list(PM_MILESTONES),
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def generate(self, selected_matches: Sequence[Any], project_name: str) -> WorkBreakdownStructure:
        """
        Generate a WBS for the selected matches.

        Args:
            selected_matches: ServiceMatch records (dicts and bare Services accepted)
            project_name: Display name of the project

        Returns:
            WorkBreakdownStructure; "empty-wbs" when no match is usable
        """
        valid = []
        for index, item in enumerate(selected_matches or []):
            match = self._coerce_match(item)
            if match is None:
                logger.warning(f"Skipping invalid service match at index {index}")
                continue
            valid.append((index, match))

        if not valid:
            logger.warning("No valid services provided for WBS generation")
            return WorkBreakdownStructure(
                id=EMPTY_WBS_ID,
                project_name=project_name,
                total_duration=0,
                total_hours=0,
                total_cost=0,
                team_size=1,
                phases=[],
                risk_assessment=WBSRiskSummary(overall=RiskLevel.LOW, factors=[]),
                assumptions=[],
            )

        logger.info(f"Generating WBS for {len(valid)} services: {project_name}")

        # phase name -> services, first-seen order
        grouped: Dict[str, List[WBSService]] = {}
        for index, match in valid:
            service = match.service
            phase_name = self._phase_name(service, index)
            template = self.breakdowns.get(service.id)
            if template is not None:
                expanded = self._expand_template(template)
            else:
                expanded = [self._expand_service(service)]
            grouped.setdefault(phase_name, []).extend(expanded)
            logger.debug(f"Placed '{service.name}' in phase '{phase_name}'")

        phases = []
        start_week = 1
        previous_id = None
        for phase_name, services in grouped.items():
            hours = sum(s.estimated_hours for s in services)
            duration = max(ceil_div(hours, HOURS_PER_WEEK), 1)
            phase = WBSPhase(
                id=f"phase-{slugify(phase_name)}",
                name=phase_name,
                description=f"Implementation phase for {phase_name}",
                start_week=start_week,
                duration=duration,
                services=services,
                total_hours=hours,
                total_cost=sum(s.total_cost for s in services),
                risk_level=highest_risk([s.risk_level for s in services], default=RiskLevel.MEDIUM),
                dependencies=[previous_id] if previous_id else [],
                milestones=[],
            )
            phases.append(phase)
            start_week += duration
            previous_id = phase.id

        work_hours = sum(p.total_hours for p in phases)
        pm_hours = round_half_up(work_hours * PM_OVERHEAD_RATIO)
        total_hours = work_hours + pm_hours
        phases.insert(0, self._build_pm_phase(pm_hours, total_hours))

        total_cost = sum(p.total_cost for p in phases)

        high_phases = sum(1 for p in phases if p.risk_level == RiskLevel.HIGH)
        medium_phases = sum(1 for p in phases if p.risk_level == RiskLevel.MEDIUM)
        if high_phases > 0:
            overall = RiskLevel.HIGH
        elif medium_phases > len(phases) / 2:
            overall = RiskLevel.MEDIUM
        else:
            overall = RiskLevel.LOW

        factors = []
        if total_hours > 200:
            factors.append("Large project scope")
        if len(phases) > 4:
            factors.append("Multiple complex phases")
        if high_phases > 0:
            factors.append("High-risk technical components")
        if any("migration" in match.service.keywords for _, match in valid):
            factors.append("Data migration complexity")

        total_weeks = max(ceil_div(total_hours, HOURS_PER_WEEK), 1)
        team_size = max(ceil_div(total_hours, HOURS_PER_PERSON_MONTH * total_weeks), 1)

        wbs = WorkBreakdownStructure(
            id=f"wbs-{int(time.time() * 1000)}",
            project_name=project_name,
            total_duration=total_weeks,
            total_hours=total_hours,
            total_cost=total_cost,
            team_size=team_size,
            phases=phases,
            risk_assessment=WBSRiskSummary(overall=overall, factors=factors),
            assumptions=list(ASSUMPTIONS),
        )

        logger.info(
            f"WBS generated: {len(phases)} phases, {total_hours}h, "
            f"${total_cost:,.0f}, {total_weeks} weeks, risk {overall.value}"
        )
        return wbs


def generate_wbs(
    selected_matches: Sequence[Any],
    project_name: str,
    breakdowns: Optional[BreakdownLibrary] = None,
) -> WorkBreakdownStructure:
    """Convenience wrapper around WBSGenerator.generate."""
    return WBSGenerator(breakdowns).generate(selected_matches, project_name)


def generate_wbs_summary(wbs: Optional[WorkBreakdownStructure]) -> WBSSummary:
    """Headline investment, timeline, phase count, team size and risk."""
    if wbs is None:
        return WBSSummary(total_investment=0, timeline="0 weeks", phases=0, team_size=0, risk_level=RiskLevel.LOW)

    return WBSSummary(
        total_investment=wbs.total_cost or 0,
        timeline=f"{wbs.total_duration or 0} weeks",
        phases=len(wbs.phases),
        team_size=wbs.team_size or 0,
        risk_level=wbs.risk_assessment.overall,
    )
