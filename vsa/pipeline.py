"""
Scoping Pipeline
Main orchestration from a free-text request to ranked services and a plan.

Stages:
1. Clarifying questions (stops here when the request is too vague,
   unless the context says questions were already asked)
2. Catalog load and project analysis, run concurrently
3. Service matching
4. Assistant response
5. WBS generation for the services the user keeps (build_plan)
"""

import concurrent.futures
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from vsa.catalog import CatalogProvider, CatalogSnapshot, load_fallback_catalog
from vsa.matching import CatalogTextMatch, ServiceMatcher
from vsa.models import Service, ServiceMatch, WorkBreakdownStructure
from vsa.questions import QuestioningResult, QuestionGenerator
from vsa.scope import ProjectAnalysis, analyze_project, generate_ai_response
from vsa.wbs import BreakdownLibrary, WBSGenerator

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one process() call."""
    text: str
    stage: str = "questions"  # questions / matched
    questioning: Optional[QuestioningResult] = None
    analysis: Optional[ProjectAnalysis] = None
    matches: List[ServiceMatch] = field(default_factory=list)
    catalog_origin: Optional[str] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)

    @property
    def needs_questions(self) -> bool:
        return self.stage == "questions"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "questioning": self.questioning.to_dict() if self.questioning else None,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "matches": [m.model_dump(mode="json", by_alias=True) for m in self.matches],
            "catalogOrigin": self.catalog_origin,
            "message": self.message,
            "warnings": list(self.warnings),
        }


class ScopingPipeline:
    """
    Request-to-plan orchestration.

    Usage:
        pipeline = ScopingPipeline()
        result = pipeline.process("Migrate 200 mailboxes to Office 365")
        if not result.needs_questions:
            wbs = pipeline.build_plan(result.matches[:3], "Acme Migration")
    """

    def __init__(
        self,
        catalog_provider: Optional[CatalogProvider] = None,
        catalog: Optional[Sequence[Service]] = None,
        matcher: Optional[ServiceMatcher] = None,
        breakdowns: Optional[BreakdownLibrary] = None,
    ):
        self.catalog_provider = catalog_provider
        self.catalog = list(catalog) if catalog is not None else None
        self.matcher = matcher or CatalogTextMatch()
        self.question_generator = QuestionGenerator()
        self.wbs_generator = WBSGenerator(breakdowns)

    def load_catalog(self) -> CatalogSnapshot:
        """Explicit catalog first, then the provider, then the packaged fallback."""
        if self.catalog is not None:
            return CatalogSnapshot(services=self.catalog, origin="provided")
        if self.catalog_provider is not None:
            return self.catalog_provider.get_catalog()
        return CatalogSnapshot(services=load_fallback_catalog(), origin="fallback")

    def process(self, text: str, context: Optional[Dict[str, Any]] = None) -> PipelineResult:
        """
        Run the request through questioning, analysis and matching.

        Args:
            text: Free-text project request
            context: Optional conversation context ("has_asked_questions")

        Returns:
            PipelineResult; stage is "questions" when the caller should ask
            the returned questions before matching
        """
        context = context or {}
        result = PipelineResult(text=text)

        logger.info("Stage 1: Clarifying questions...")
        result.questioning = self.question_generator.generate(text, context)
        asked_before = bool(context.get("has_asked_questions") or context.get("hasAskedQuestions"))
        if result.questioning.needs_questioning and not asked_before:
            result.message = result.questioning.reasoning
            logger.info(f"Asking {len(result.questioning.questions)} questions before matching")
            return result

        logger.info("Stage 2: Catalog and project analysis...")
        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as ex:
            catalog_future = ex.submit(self.load_catalog)
            analysis_future = ex.submit(analyze_project, text)
            snapshot = catalog_future.result()
            result.analysis = analysis_future.result()

        result.catalog_origin = snapshot.origin
        if snapshot.error:
            result.warnings.append(f"Live catalog unavailable: {snapshot.error}")

        logger.info(f"Stage 3: Matching against {len(snapshot)} services ({snapshot.origin})...")
        result.matches = self.matcher.match(text, snapshot.services)

        result.message = generate_ai_response(text, result.matches, result.analysis)
        result.stage = "matched"
        logger.info(f"Pipeline complete: {len(result.matches)} matches")
        return result

    def build_plan(self, selected: Sequence[Any], project_name: str) -> WorkBreakdownStructure:
        """WBS for the selected matches."""
        logger.info(f"Building WBS for '{project_name}' from {len(selected)} selections")
        return self.wbs_generator.generate(selected, project_name)
