"""
Evaluation orchestrator.

Fans out one evaluator call per selected heuristic and collects whatever
succeeded. Failed calls are counted, never fatal.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..utils.constants import DEFAULT_MAX_CONCURRENCY
from ..utils.log import get_logger
from .evaluator import HeuristicEvaluation, HeuristicEvaluator
from .heuristics import ALL_HEURISTICS, Heuristic, HeuristicStrength, HeuristicViolation
from .structural import StructuralFindings
from .visual import VisualDecomposition


@dataclass
class OrchestrationResult:
    """Union of all successful evaluations, in canonical heuristic order."""
    violations: List[HeuristicViolation] = field(default_factory=list)
    strengths: List[HeuristicStrength] = field(default_factory=list)
    succeeded: List[Heuristic] = field(default_factory=list)
    failed: Dict[Heuristic, str] = field(default_factory=dict)

    @property
    def requested(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def all_failed(self) -> bool:
        return not self.succeeded

    def failure_warning(self) -> Optional[str]:
        """Summary warning for failed heuristics, or None."""
        if not self.failed:
            return None
        ids = ", ".join(h.id for h in self.failed)
        return f"{len(self.failed)} of {self.requested} heuristic evaluations failed: {ids}"


class EvaluationOrchestrator:
    """
    Runs heuristic evaluations concurrently.

    Uses asyncio.gather with return_exceptions so one failing call never
    cancels the others, and a semaphore to cap in-flight calls.
    """

    def __init__(
        self,
        evaluator: HeuristicEvaluator,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    ):
        """
        Initialize the orchestrator.

        Args:
            evaluator: Shared heuristic evaluator
            max_concurrency: Maximum evaluations in flight at once
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.evaluator = evaluator
        self.max_concurrency = max_concurrency
        self.logger = get_logger("orchestrator")

    async def run(
        self,
        heuristics: Sequence[Heuristic],
        visual: VisualDecomposition,
        structural: StructuralFindings,
        page
    ) -> OrchestrationResult:
        """
        Evaluate every selected heuristic and wait for all to settle.

        Args:
            heuristics: Heuristics to evaluate
            visual: Stage 1 output
            structural: Stage 2 output
            page: CapturedPage

        Returns:
            OrchestrationResult aggregated in canonical heuristic order
        """
        selected = [h for h in ALL_HEURISTICS if h in set(heuristics)]
        self.logger.info(f"Stage 3: evaluating {len(selected)} heuristics")

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def evaluate_with_limit(heuristic: Heuristic) -> HeuristicEvaluation:
            async with semaphore:
                return await self.evaluator.evaluate(heuristic, visual, structural, page)

        outcomes = await asyncio.gather(
            *[evaluate_with_limit(h) for h in selected],
            return_exceptions=True
        )

        result = OrchestrationResult()
        for heuristic, outcome in zip(selected, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                self.logger.warning(
                    f"Evaluation of {heuristic.display_name} raised: {outcome!r}"
                )
                result.failed[heuristic] = str(outcome) or type(outcome).__name__
                continue
            if not outcome.succeeded:
                result.failed[heuristic] = outcome.error
                continue
            result.succeeded.append(heuristic)
            result.violations.extend(outcome.violations)
            result.strengths.extend(outcome.strengths)

        self.logger.info(
            f"Stage 3 complete: {len(result.succeeded)}/{len(selected)} succeeded, "
            f"{len(result.violations)} candidate violations, {len(result.strengths)} strengths"
        )
        return result
