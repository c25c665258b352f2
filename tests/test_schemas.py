import pytest

from fakes import decomposition_payload, violation_payload
from heuristic_auditor.analyzer.schemas import (
    DecompositionPayload,
    EvaluationPayload,
    ViolationPayload,
    parse_payload,
)


def test_valid_evaluation_payload():
    result = parse_payload(EvaluationPayload, {
        "violations": [violation_payload()],
        "strengths": [{"description": "Clear primary action", "example": "Place order"}],
    })
    assert result.ok
    violation = result.value.violations[0]
    assert violation.page_element == "Place order button"
    assert violation.bounding_box.width == 20
    assert result.value.strengths[0].example == "Place order"


def test_missing_lists_default_to_empty():
    result = parse_payload(EvaluationPayload, {})
    assert result.ok
    assert result.value.violations == []
    assert result.value.strengths == []


@pytest.mark.parametrize("severity", ["HIGH", " Medium ", "low"])
def test_severity_is_normalized(severity):
    result = parse_payload(ViolationPayload, violation_payload(severity=severity))
    assert result.ok
    assert result.value.severity == severity.strip().lower()


@pytest.mark.parametrize("overrides", [
    {"severity": "critical"},
    {"title": "   "},
    {"pageElement": None},
    {"researchBacking": ""},
    {"boundingBox": {"x": 10, "y": 10, "width": 120, "height": 5}},
    {"boundingBox": {"x": -1, "y": 10, "width": 20, "height": 5}},
])
def test_invalid_violation_rejected(overrides):
    result = parse_payload(ViolationPayload, violation_payload(**overrides))
    assert not result.ok
    assert result.error.startswith("ViolationPayload:")


def test_missing_required_field_rejected():
    payload = violation_payload()
    del payload["userImpact"]
    result = parse_payload(ViolationPayload, payload)
    assert not result.ok
    assert "userImpact" in result.error


@pytest.mark.parametrize("data", [None, [], "violations", 3])
def test_non_object_rejected(data):
    result = parse_payload(EvaluationPayload, data)
    assert not result.ok
    assert "expected a JSON object" in result.error


def test_decomposition_payload():
    result = parse_payload(DecompositionPayload, decomposition_payload())
    assert result.ok
    element = result.value.elements[0]
    assert element.visual_properties.font_size == "16"
    assert element.interaction_state.has_hover_state
    assert len(result.value.visual_hierarchy.main_content) == 1


def test_decomposition_requires_elements():
    payload = decomposition_payload()
    del payload["elements"]
    assert not parse_payload(DecompositionPayload, payload).ok


def test_contrast_ratio_out_of_range_rejected():
    payload = decomposition_payload()
    payload["contrastIssues"] = [
        {"element": "Footer text", "foreground": "#777", "background": "#888", "ratio": 0.4}
    ]
    assert not parse_payload(DecompositionPayload, payload).ok
