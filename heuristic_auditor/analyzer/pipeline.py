"""
Heuristic evaluation pipeline.

Runs the five stages for one captured page:

1. visual decomposition of the screenshot (model call, retried, degradable)
2. structural analysis of the markup (pure, runs alongside stage 1)
3. per-heuristic evaluation fan-out (partial failure tolerated)
4. cross-validation of candidate violations
5. weighted scoring

Fatal input problems are raised before any stage runs; a caller-imposed
deadline cancels in-flight work and returns nothing.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..exceptions import ModelCallError, PipelineTimeoutError, SchemaValidationError
from ..utils.config import Settings
from ..utils.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_TEXT_MODEL, DEFAULT_VISION_MODEL
from ..utils.log import get_logger
from ..utils.retry import RetryPolicy
from .evaluator import HeuristicEvaluator
from .heuristics import Heuristic, HeuristicStrength, HeuristicViolation, parse_selection
from .model_client import ModelClient
from .orchestrator import EvaluationOrchestrator
from .scoring import Scorer, ScoringContext, ScoringResult
from .structural import StructuralAnalyzer, StructuralFindings
from .validation import CrossValidator
from .visual import VisualDecomposer, VisualDecomposition

VISUAL_FAILED_WARNING = "Visual decomposition failed; continuing without visual evidence"

HeuristicSelection = Union[None, str, Iterable[Union[Heuristic, str, int]]]


@dataclass(frozen=True)
class PipelineResult:
    """Everything a run produced for one page."""
    scoring: ScoringResult
    violations: Tuple[HeuristicViolation, ...]
    strengths: Tuple[HeuristicStrength, ...]
    stage1_success: bool
    heuristics_requested: Tuple[Heuristic, ...]
    heuristics_succeeded: Tuple[Heuristic, ...]
    heuristics_failed: Dict[Heuristic, str] = field(default_factory=dict)
    violations_before_validation: int = 0
    duplicates_removed: int = 0
    false_positives_removed: int = 0
    merged_violations: int = 0
    warnings: Tuple[str, ...] = ()
    visual: Optional[VisualDecomposition] = None
    structural: Optional[StructuralFindings] = None

    @property
    def overall_score(self) -> int:
        return self.scoring.overall_score

    @property
    def heuristics_evaluated(self) -> int:
        return len(self.heuristics_succeeded)

    @property
    def violations_after_validation(self) -> int:
        return len(self.violations)

    def to_dict(self) -> Dict[str, Any]:
        """JSON form returned to the surrounding application."""
        return {
            "overallScore": self.scoring.overall_score,
            "violations": [v.to_dict() for v in self.violations],
            "strengths": [s.to_dict() for s in self.strengths],
            "breakdown": dict(self.scoring.breakdown),
            "categoryScores": dict(self.scoring.category_scores),
            "industryComparison": dict(self.scoring.industry_comparison),
            "metadata": {
                "stage1Success": self.stage1_success,
                "heuristicsEvaluated": self.heuristics_evaluated,
                "heuristicsRequested": len(self.heuristics_requested),
                "heuristicsFailed": [h.id for h in self.heuristics_failed],
                "violationsBeforeValidation": self.violations_before_validation,
                "violationsAfterValidation": self.violations_after_validation,
                "duplicatesRemoved": self.duplicates_removed,
                "falsePositivesRemoved": self.false_positives_removed,
                "mergedViolations": self.merged_violations,
                "warnings": list(self.warnings),
            },
        }


class HeuristicPipeline:
    """
    Five-stage heuristic evaluation of a single page.

    Stages are plain objects built from the model client; any of them can
    be replaced after construction (tests swap in fakes this way).
    """

    def __init__(
        self,
        client,
        vision_model: str = DEFAULT_VISION_MODEL,
        text_model: str = DEFAULT_TEXT_MODEL,
        retry_policy: Optional[RetryPolicy] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        reject_technical: bool = False,
        require_evidence: bool = False,
        pipeline_timeout: Optional[float] = None
    ):
        """
        Initialize the pipeline.

        Args:
            client: Model client (async complete_json)
            vision_model: Model for visual decomposition
            text_model: Model for heuristic evaluation
            retry_policy: Retry policy for the visual decomposition call
            max_concurrency: Maximum concurrent heuristic evaluations
            reject_technical: Drop technical/SEO findings during validation
            require_evidence: Drop findings without research backing or user impact
            pipeline_timeout: Deadline for a whole run in seconds (None = no limit)
        """
        self.visual_decomposer = VisualDecomposer(client, vision_model, retry_policy)
        self.structural_analyzer = StructuralAnalyzer()
        self.evaluator = HeuristicEvaluator(client, text_model)
        self.orchestrator = EvaluationOrchestrator(self.evaluator, max_concurrency)
        self.validator = CrossValidator(
            reject_technical=reject_technical, require_evidence=require_evidence
        )
        self.scorer = Scorer()
        self.pipeline_timeout = pipeline_timeout
        self.logger = get_logger("pipeline")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, client=None) -> "HeuristicPipeline":
        """
        Build a pipeline from configuration.

        Args:
            settings: Settings (loaded from the environment when None)
            client: Model client (built from settings when None)
        """
        settings = settings or Settings.from_env()
        return cls(
            client=client or ModelClient.from_settings(settings),
            vision_model=settings.vision_model,
            text_model=settings.text_model,
            retry_policy=RetryPolicy(
                max_attempts=settings.visual_retry_attempts,
                delay=settings.visual_retry_delay,
                retry_on=(ModelCallError, SchemaValidationError),
            ),
            max_concurrency=settings.max_concurrency,
            reject_technical=settings.reject_technical,
            require_evidence=settings.require_evidence,
            pipeline_timeout=settings.pipeline_timeout,
        )

    async def run(self, page, heuristic_selection: HeuristicSelection = "all") -> PipelineResult:
        """
        Evaluate a captured page.

        Args:
            page: CapturedPage
            heuristic_selection: "all", None, or heuristic ids/numbers/names

        Returns:
            PipelineResult

        Raises:
            InvalidInputError: Invalid page, screenshot or heuristic selection
            PipelineTimeoutError: The pipeline deadline expired
        """
        heuristics = parse_selection(heuristic_selection)
        page = page.validate()

        if self.pipeline_timeout is None:
            return await self._run_stages(page, heuristics)
        try:
            return await asyncio.wait_for(self._run_stages(page, heuristics), self.pipeline_timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"Pipeline timed out after {self.pipeline_timeout}s for {page.url}")
            raise PipelineTimeoutError(
                f"Pipeline did not finish within {self.pipeline_timeout}s"
            )

    async def _run_stages(self, page, heuristics: List[Heuristic]) -> PipelineResult:
        self.logger.info(f"Evaluating {page.url} against {len(heuristics)} heuristics")

        async def analyze_structure() -> StructuralFindings:
            return self.structural_analyzer.analyze(page.html, page.markdown)

        visual, structural = await asyncio.gather(
            self.visual_decomposer.decompose(page.screenshot, page.html),
            analyze_structure(),
        )

        warnings = []
        if visual.failed:
            warnings.append(VISUAL_FAILED_WARNING)

        orchestration = await self.orchestrator.run(heuristics, visual, structural, page)
        failure_warning = orchestration.failure_warning()
        if failure_warning:
            warnings.append(failure_warning)
            self.logger.warning(failure_warning)

        validation = self.validator.validate(orchestration.violations)

        scoring = self.scorer.score(
            validation.validated,
            orchestration.strengths,
            ScoringContext(
                visual_failed=visual.failed,
                evidence_found=visual.has_evidence,
                evaluations_succeeded=not orchestration.all_failed,
                evaluated=orchestration.succeeded,
            ),
        )

        self.logger.info(f"Evaluation of {page.url} complete: score {scoring.overall_score}")
        return PipelineResult(
            scoring=scoring,
            violations=tuple(validation.validated),
            strengths=tuple(orchestration.strengths),
            stage1_success=not visual.failed,
            heuristics_requested=tuple(heuristics),
            heuristics_succeeded=tuple(orchestration.succeeded),
            heuristics_failed=dict(orchestration.failed),
            violations_before_validation=len(orchestration.violations),
            duplicates_removed=validation.duplicates_removed,
            false_positives_removed=validation.false_positives_removed,
            merged_violations=validation.merged,
            warnings=tuple(warnings),
            visual=visual,
            structural=structural,
        )


def evaluate(
    page,
    heuristic_selection: HeuristicSelection = "all",
    *,
    settings: Optional[Settings] = None,
    pipeline: Optional[HeuristicPipeline] = None
) -> PipelineResult:
    """
    Synchronously evaluate a captured page.

    Args:
        page: CapturedPage
        heuristic_selection: "all", None, or heuristic ids/numbers/names
        settings: Settings used to build a pipeline when none is given
        pipeline: Preconfigured pipeline

    Returns:
        PipelineResult
    """
    pipeline = pipeline or HeuristicPipeline.from_settings(settings)
    return asyncio.run(pipeline.run(page, heuristic_selection))
