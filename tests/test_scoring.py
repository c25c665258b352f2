import pytest

from fakes import make_strength, make_violation
from heuristic_auditor.analyzer.heuristics import ALL_HEURISTICS, Heuristic, Severity
from heuristic_auditor.analyzer.scoring import (
    CAP_ALL_EVALUATIONS_FAILED,
    CAP_INCONCLUSIVE,
    CAP_VISUAL_FAILED,
    Scorer,
    ScoringContext,
    industry_comparison,
    round_half_up,
)


def strengths(count):
    return [make_strength() for _ in range(count)]


def test_no_findings_with_evidence_is_not_capped():
    result = Scorer().score([], [], ScoringContext(evidence_found=True))
    assert result.overall_score == 75
    assert result.breakdown["capReason"] is None
    assert result.breakdown["confidenceCap"] is None
    assert result.industry_comparison == {"percentile": 50, "category": "Top 50% - Good UX"}


def test_weighted_penalties():
    violations = [
        make_violation(heuristic=Heuristic.VISIBILITY, severity=Severity.HIGH),
        make_violation(heuristic=Heuristic.CONSISTENCY, severity=Severity.MEDIUM),
    ]
    result = Scorer().score(violations, [])

    assert result.overall_score == 55
    assert result.breakdown["highViolationsPenalty"] == 14.4
    assert result.breakdown["mediumViolationsPenalty"] == 6.0
    assert result.breakdown["lowViolationsPenalty"] == 0.0
    assert result.breakdown["totalPenalty"] == 20.4
    assert result.category_scores["#1: Visibility of System Status"] == 85.6
    assert result.category_scores["#4: Consistency and Standards"] == 94.0
    assert result.category_scores["#10: Help and Documentation"] == 100.0


def test_strength_bonus_is_capped():
    assert Scorer().score([], strengths(2)).breakdown["strengthsBonus"] == 5.0
    result = Scorer().score([], strengths(10))
    assert result.breakdown["strengthsBonus"] == 15
    assert result.overall_score == 90


def test_score_floor():
    violations = [make_violation(severity=Severity.HIGH) for _ in range(10)]
    result = Scorer().score(violations, [])
    assert result.overall_score == 25
    assert result.category_scores["#1: Visibility of System Status"] == 0.0
    assert result.industry_comparison["percentile"] == 5


@pytest.mark.parametrize("context,reason", [
    (ScoringContext(visual_failed=True, evidence_found=False), CAP_VISUAL_FAILED),
    (ScoringContext(evaluations_succeeded=False), CAP_ALL_EVALUATIONS_FAILED),
])
def test_confidence_caps_with_strengths(context, reason):
    result = Scorer().score([], strengths(6), context)
    assert result.overall_score == 75
    assert result.breakdown["capReason"] == reason
    assert result.breakdown["confidenceCap"] == 75


def test_inconclusive_cap_needs_empty_findings():
    context = ScoringContext(evidence_found=False)
    assert Scorer().score([], [], context).breakdown["capReason"] == CAP_INCONCLUSIVE
    assert Scorer().score([], strengths(1), context).breakdown["capReason"] is None


def test_cap_never_raises_a_low_score():
    violations = [make_violation(severity=Severity.HIGH)]
    result = Scorer().score(violations, [], ScoringContext(visual_failed=True))
    assert result.overall_score == 61
    assert result.breakdown["capReason"] == CAP_VISUAL_FAILED


def test_unevaluated_categories_are_none():
    evaluated = [Heuristic.VISIBILITY, Heuristic.HELP_DOCUMENTATION]
    result = Scorer().score([], [], ScoringContext(evaluated=evaluated))

    assert list(result.category_scores) == [h.display_name for h in ALL_HEURISTICS]
    scored = {name for name, value in result.category_scores.items() if value is not None}
    assert scored == {h.display_name for h in evaluated}


@pytest.mark.parametrize("value,expected", [(54.6, 55), (74.5, 75), (72.5, 73), (25.0, 25), (89.4, 89)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


@pytest.mark.parametrize("score,percentile", [
    (95, 95), (90, 95), (89, 75), (80, 75), (79, 50), (70, 50),
    (69, 30), (60, 30), (59, 15), (50, 15), (49, 5), (25, 5),
])
def test_industry_bands(score, percentile):
    assert industry_comparison(score)["percentile"] == percentile
