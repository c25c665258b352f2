import asyncio

import pytest

from fakes import FakeModelClient, decomposition_payload, png_bytes
from heuristic_auditor.analyzer.heuristics import BoundingBox
from heuristic_auditor.analyzer.visual import (
    ContrastIssue,
    VisualDecomposer,
    VisualDecomposition,
    VisualElement,
    VisualProperties,
    audit_contrast,
)
from heuristic_auditor.exceptions import (
    InvalidScreenshotError,
    ModelCallError,
    SchemaValidationError,
)
from heuristic_auditor.utils.retry import RetryPolicy


def make_decomposer(client, sleep):
    policy = RetryPolicy(
        max_attempts=2, delay=1.0, retry_on=(ModelCallError, SchemaValidationError), sleep=sleep
    )
    return VisualDecomposer(client, "vision-test", policy)


def test_successful_decomposition(fake_sleep):
    client = FakeModelClient()
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert not decomposition.failed
    assert decomposition.has_evidence
    assert client.visual_calls == 1
    assert client.images == [png_bytes()]
    button = decomposition.elements[0]
    assert button.type == "button"
    assert button.bounding_box == BoundingBox(60, 70, 20, 6)
    assert button.interaction_state.has_hover_state
    assert len(decomposition.visual_hierarchy.main_content) == 1
    assert decomposition.contrast_issues == ()
    assert fake_sleep.delays == []


def test_one_retry_then_success(fake_sleep):
    client = FakeModelClient(visual=[ModelCallError("503"), decomposition_payload()])
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert not decomposition.failed
    assert client.visual_calls == 2
    assert fake_sleep.delays == [1.0]


def test_degrades_after_retries_exhausted(fake_sleep):
    client = FakeModelClient(visual=[ModelCallError("503"), ModelCallError("503")])
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert decomposition.failed
    assert not decomposition.has_evidence
    assert decomposition.elements == ()
    assert client.visual_calls == 2
    assert fake_sleep.delays == [1.0]


def test_schema_failure_is_retried_then_degrades(fake_sleep):
    client = FakeModelClient(visual={"elements": "not a list"})
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert decomposition.failed
    assert client.visual_calls == 2


def test_unexpected_error_degrades_without_retry(fake_sleep):
    client = FakeModelClient(visual=[RuntimeError("gateway returned garbage")])
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert decomposition.failed
    assert client.visual_calls == 1
    assert fake_sleep.delays == []


def test_no_elements_is_not_evidence(fake_sleep):
    client = FakeModelClient(visual=decomposition_payload(elements=[]))
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert not decomposition.failed
    assert not decomposition.has_evidence


@pytest.mark.parametrize("screenshot", [b"", None, b"tiny", "https://cdn.example.com/a.png"])
def test_invalid_screenshot_raises_before_model_call(screenshot, fake_sleep):
    client = FakeModelClient()
    with pytest.raises(InvalidScreenshotError):
        asyncio.run(make_decomposer(client, fake_sleep).decompose(screenshot))
    assert client.visual_calls == 0


def element(text, fg, bg):
    return VisualElement(
        type="text",
        text=text,
        bounding_box=BoundingBox(0, 90, 100, 5),
        visual_properties=VisualProperties(background_color=bg, text_color=fg),
    )


def test_audit_contrast():
    decomposition = VisualDecomposition(
        elements=(
            element("Footer legal text", "#cccccc", "#ffffff"),
            element("Headline", "#111111", "#ffffff"),
            element("Unknown colors", "brand", "#ffffff"),
        ),
        contrast_issues=(
            # Model underestimated a passing pair
            ContrastIssue("Body copy", "#000000", "#ffffff", 2.0, "fail"),
            # Colors the formula cannot read keep the model's estimate
            ContrastIssue("Promo banner", "brand-blue", "brand-navy", 3.2, "AA-large"),
        ),
    )

    issues = audit_contrast(decomposition)

    assert [i.element for i in issues] == ["Promo banner", "Footer legal text"]
    assert issues[0].ratio == 3.2
    assert issues[0].wcag_level == "AA-large"
    assert issues[1].foreground == "#cccccc"
    assert issues[1].ratio < 4.5
    assert issues[1].wcag_level == "fail"


def test_decomposer_applies_contrast_audit(fake_sleep):
    payload = decomposition_payload(elements=[{
        "type": "text",
        "text": "Terms apply",
        "boundingBox": {"x": 10, "y": 95, "width": 30, "height": 2},
        "visualProperties": {"backgroundColor": "#ffffff", "textColor": "#bbbbbb"},
    }])
    client = FakeModelClient(visual=payload)
    decomposition = asyncio.run(make_decomposer(client, fake_sleep).decompose(png_bytes()))

    assert len(decomposition.contrast_issues) == 1
    assert decomposition.contrast_issues[0].element == "Terms apply"


def test_empty_decomposition_dict():
    data = VisualDecomposition.empty().to_dict()
    assert data["failed"] is True
    assert data["elements"] == []
    assert set(data["visualHierarchy"]) == {"header", "navigation", "mainContent", "footer", "modals"}
