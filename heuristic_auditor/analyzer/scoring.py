"""
Research-weighted scorer.

Turns validated violations and strengths into a 25-95 score, a penalty
breakdown, per-heuristic category scores and an industry band.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from ..utils.log import get_logger
from .heuristics import ALL_HEURISTICS, Heuristic, HeuristicStrength, HeuristicViolation, Severity

# "Average site" prior; most sites have some issues
BASELINE_SCORE = 75

MIN_SCORE = 25
MAX_SCORE = 95

STRENGTH_BONUS = 2.5
MAX_STRENGTHS_BONUS = 15

# Applied when the analysis cannot be trusted to show a genuinely good page
CONFIDENCE_CAP = 75

CAP_VISUAL_FAILED = "visual_decomposition_failed"
CAP_INCONCLUSIVE = "inconclusive_no_evidence"
CAP_ALL_EVALUATIONS_FAILED = "all_evaluations_failed"

# (minimum score, percentile, label), highest band first
INDUSTRY_BANDS = (
    (90, 95, "Top 5% - Exceptional UX"),
    (80, 75, "Top 25% - Excellent UX"),
    (70, 50, "Top 50% - Good UX"),
    (60, 30, "Top 70% - Average UX"),
    (50, 15, "Bottom 35% - Below Average"),
)
LOWEST_BAND = (5, "Bottom 15% - Critical Issues")


@dataclass(frozen=True)
class ScoringContext:
    """
    Signals about the quality of the evidence behind the findings.

    Attributes:
        visual_failed: Stage 1 degraded to an empty decomposition
        evidence_found: Stage 1 produced at least one element
        evaluations_succeeded: At least one heuristic evaluation succeeded
        evaluated: Heuristics that were evaluated (None means all ten)
    """
    visual_failed: bool = False
    evidence_found: bool = True
    evaluations_succeeded: bool = True
    evaluated: Optional[Sequence[Heuristic]] = None


@dataclass(frozen=True)
class ScoringResult:
    overall_score: int
    breakdown: Dict[str, Any] = field(default_factory=dict)
    category_scores: Dict[str, Optional[float]] = field(default_factory=dict)
    industry_comparison: Dict[str, Any] = field(default_factory=dict)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def industry_comparison(score: float) -> Dict[str, Any]:
    """Map a score to its industry percentile band."""
    for minimum, percentile, category in INDUSTRY_BANDS:
        if score >= minimum:
            return {"percentile": percentile, "category": category}
    percentile, category = LOWEST_BAND
    return {"percentile": percentile, "category": category}


class Scorer:
    """Weighted scoring of validated findings."""

    def __init__(self):
        self.logger = get_logger("scoring")

    def cap_reason(
        self,
        violations: Sequence[HeuristicViolation],
        strengths: Sequence[HeuristicStrength],
        context: ScoringContext
    ) -> Optional[str]:
        """Return the first confidence cap that applies, or None."""
        if context.visual_failed:
            return CAP_VISUAL_FAILED
        if not violations and not strengths and not context.evidence_found:
            return CAP_INCONCLUSIVE
        if not context.evaluations_succeeded:
            return CAP_ALL_EVALUATIONS_FAILED
        return None

    def score(
        self,
        violations: Sequence[HeuristicViolation],
        strengths: Sequence[HeuristicStrength],
        context: Optional[ScoringContext] = None
    ) -> ScoringResult:
        """
        Score validated findings.

        Args:
            violations: Validated violations
            strengths: Strengths
            context: Evidence-quality signals

        Returns:
            ScoringResult
        """
        context = context or ScoringContext()
        self.logger.info(
            f"Stage 5: scoring {len(violations)} violations, {len(strengths)} strengths"
        )

        penalties = {severity: 0.0 for severity in Severity}
        per_heuristic = {heuristic: 0.0 for heuristic in ALL_HEURISTICS}
        for violation in violations:
            penalties[violation.severity] += violation.penalty
            per_heuristic[violation.heuristic] += violation.penalty

        total_penalty = sum(penalties.values())
        strengths_bonus = min(MAX_STRENGTHS_BONUS, len(strengths) * STRENGTH_BONUS)

        raw = BASELINE_SCORE - total_penalty + strengths_bonus
        overall = round_half_up(max(MIN_SCORE, min(MAX_SCORE, raw)))

        reason = self.cap_reason(violations, strengths, context)
        if reason:
            overall = min(overall, CONFIDENCE_CAP)

        evaluated = set(ALL_HEURISTICS if context.evaluated is None else context.evaluated)
        category_scores: Dict[str, Optional[float]] = {}
        for heuristic in ALL_HEURISTICS:
            if heuristic in evaluated:
                value = max(0.0, min(100.0, 100 - per_heuristic[heuristic]))
                category_scores[heuristic.display_name] = round(value, 1)
            else:
                category_scores[heuristic.display_name] = None

        breakdown = {
            "baseScore": BASELINE_SCORE,
            "highViolationsPenalty": round(penalties[Severity.HIGH], 1),
            "mediumViolationsPenalty": round(penalties[Severity.MEDIUM], 1),
            "lowViolationsPenalty": round(penalties[Severity.LOW], 1),
            "totalPenalty": round(total_penalty, 1),
            "strengthsBonus": strengths_bonus,
            "confidenceCap": CONFIDENCE_CAP if reason else None,
            "capReason": reason,
        }

        self.logger.info(
            f"Stage 5 complete: score {overall} (raw {raw:.1f}"
            + (f", capped: {reason})" if reason else ")")
        )
        return ScoringResult(
            overall_score=overall,
            breakdown=breakdown,
            category_scores=category_scores,
            industry_comparison=industry_comparison(overall),
        )
