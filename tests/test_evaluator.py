import asyncio

from fakes import FakeModelClient, make_page, violation_payload
from heuristic_auditor.analyzer.evaluator import HeuristicEvaluator
from heuristic_auditor.analyzer.heuristics import BoundingBox, Heuristic, Severity
from heuristic_auditor.analyzer.structural import analyze_structure
from heuristic_auditor.analyzer.visual import VisualDecomposition
from heuristic_auditor.exceptions import ModelCallError


def run_evaluation(client, heuristic=Heuristic.VISIBILITY, page=None, visual=None):
    page = page or make_page()
    evaluator = HeuristicEvaluator(client, "text-test")
    return asyncio.run(evaluator.evaluate(
        heuristic,
        visual or VisualDecomposition.empty(failed=False),
        analyze_structure(page.html, page.markdown),
        page,
    ))


def test_findings_are_stamped_with_requested_heuristic():
    client = FakeModelClient(evaluations={
        Heuristic.VISIBILITY: {
            "violations": [violation_payload(severity="HIGH")],
            "strengths": [{"description": "Cart count is always visible", "example": "Header cart badge"}],
        }
    })
    evaluation = run_evaluation(client)

    assert evaluation.succeeded
    violation = evaluation.violations[0]
    assert violation.heuristic is Heuristic.VISIBILITY
    assert violation.severity is Severity.HIGH
    assert violation.bounding_box == BoundingBox(60, 70, 20, 6)
    assert evaluation.strengths[0].heuristic is Heuristic.VISIBILITY
    assert client.evaluation_calls == [Heuristic.VISIBILITY]


def test_screenshot_is_sent_with_each_call():
    page = make_page()
    client = FakeModelClient()
    run_evaluation(client, page=page)
    assert client.images == [page.screenshot]


def test_matching_heuristic_field_is_accepted():
    client = FakeModelClient(default_evaluation={
        "violations": [violation_payload(heuristic="#5: Error Prevention")],
    })
    evaluation = run_evaluation(client, Heuristic.ERROR_PREVENTION)
    assert evaluation.succeeded
    assert len(evaluation.violations) == 1


def test_mismatched_heuristic_fails_the_call():
    client = FakeModelClient(default_evaluation={
        "violations": [violation_payload(heuristic="consistency")],
    })
    evaluation = run_evaluation(client)
    assert not evaluation.succeeded
    assert evaluation.error == "Response names consistency while evaluating visibility"
    assert evaluation.violations == ()


def test_unknown_heuristic_fails_the_call():
    client = FakeModelClient(default_evaluation={
        "strengths": [{"heuristic": "delight", "description": "Nice colors"}],
    })
    evaluation = run_evaluation(client)
    assert not evaluation.succeeded
    assert "unknown heuristic" in evaluation.error


def test_missing_required_field_fails_the_whole_call():
    broken = violation_payload()
    del broken["recommendation"]
    client = FakeModelClient(default_evaluation={"violations": [violation_payload(), broken]})
    evaluation = run_evaluation(client)
    assert not evaluation.succeeded
    assert evaluation.error.startswith("EvaluationPayload:")


def test_transport_error_returns_failure():
    client = FakeModelClient(default_evaluation=ModelCallError("HTTP 500"))
    evaluation = run_evaluation(client)
    assert not evaluation.succeeded
    assert evaluation.error == "HTTP 500"


def test_context_without_visual_evidence():
    page = make_page(metadata={"title": "Checkout"})
    evaluator = HeuristicEvaluator(FakeModelClient())
    context = evaluator.build_context(
        Heuristic.VISIBILITY,
        VisualDecomposition.empty(),
        analyze_structure(page.html),
        page,
    )
    assert context.startswith("PAGE: https://shop.example.com/checkout\nTITLE: Checkout")
    assert "VISUAL DECOMPOSITION: unavailable" in context
    assert "STRUCTURAL FINDINGS:" in context
    assert "PAGE CONTENT:\n# Checkout" in context
    assert "UI PATTERN SIGNALS:\n- BAD [Buttons]" in context


def test_context_is_trimmed():
    page = make_page(markdown="word " * 2000)
    evaluator = HeuristicEvaluator(FakeModelClient())
    context = evaluator.build_context(
        Heuristic.HELP_DOCUMENTATION,
        VisualDecomposition.empty(failed=False),
        analyze_structure(page.html),
        page,
    )
    content = context.split("PAGE CONTENT:\n", 1)[1].split("\n\nHTML EXCERPT:", 1)[0]
    assert len(content) == 2000
    assert "UI PATTERN SIGNALS" not in context
