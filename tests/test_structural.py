import pytest

from heuristic_auditor.analyzer.structural import StructuralAnalyzer, analyze_structure


def test_images_without_alt_are_listed():
    findings = analyze_structure('<img src="a.png"><img src="b.png" alt=""><img src="c.png">')
    missing = findings.accessibility.missing_alt_text
    assert len(missing) == 2
    assert missing[0].startswith("Image 1: <img")
    assert 'c.png' in missing[1]


def test_form_labels_cross_referenced_by_id():
    html = """
    <form>
      <label for="email">Email</label><input id="email" type="email">
      <input id="phone" type="tel">
      <label>Name <input id="name" type="text"></label>
      <input type="text" aria-label="Search">
      <input type="hidden" name="csrf">
      <input type="submit" value="Send">
      <textarea></textarea>
    </form>
    """
    findings = analyze_structure(html)

    inputs = {entry.id: entry for entry in findings.forms.inputs}
    assert inputs["email"].has_label
    assert not inputs["phone"].has_label
    assert inputs["name"].has_label
    # hidden and submit inputs are not user-editable controls
    assert all(entry.type not in ("hidden", "submit") for entry in findings.forms.inputs)
    assert len(findings.forms.inputs) == 5

    unlabeled = findings.accessibility.missing_form_labels
    assert "Input #phone (type: tel)" in unlabeled
    assert any(label.endswith("(type: textarea)") and "unknown-" in label for label in unlabeled)
    assert len(unlabeled) == 2


def test_validation_patterns():
    html = """
    <form>
      <label for="zip">Zip *</label>
      <input id="zip" pattern="[0-9]{5}" oninput="check(this)">
    </form>
    """
    patterns = analyze_structure(html).forms.validation_patterns
    assert patterns.inline_validation
    assert patterns.client_side_validation
    assert patterns.required_indicators


def test_no_validation_signals():
    patterns = analyze_structure('<form><input id="q" type="text"></form>').forms.validation_patterns
    assert not patterns.inline_validation
    assert not patterns.client_side_validation
    assert not patterns.required_indicators


def test_navigation_findings():
    html = """
    <a href="#content" class="skip-link">Skip to content</a>
    <nav>
      <button class="navbar-toggler">Menu</button>
      <a href="/">Home</a><a href="/docs">Docs</a>
      <ul class="dropdown"><li><a href="/docs/api">API</a></li></ul>
    </nav>
    <ol aria-label="Breadcrumb"><li><a href="/">Home</a></li></ol>
    """
    navigation = analyze_structure(html).navigation
    assert navigation.skip_links
    assert navigation.breadcrumbs
    assert navigation.primary_nav.type == "semantic"
    assert navigation.primary_nav.items == 3
    assert navigation.primary_nav.has_dropdowns
    assert navigation.primary_nav.is_mobile_responsive


def test_role_navigation_and_none():
    role_nav = analyze_structure('<div role="navigation"><a href="/">Home</a></div>')
    assert role_nav.navigation.primary_nav.type == "role"
    assert role_nav.navigation.primary_nav.items == 1

    assert analyze_structure("<p>No nav</p>").navigation.primary_nav.type == "none"


def test_button_inventory():
    html = """
    <button type="submit">Buy</button>
    <button type="button" aria-label="Close"><svg></svg></button>
    <button disabled><svg></svg></button>
    <div role="button">Toggle</div>
    <input type="reset" value="Clear">
    <a href="/x"><i class="icon"></i></a>
    """
    findings = analyze_structure(html)
    buttons = findings.buttons
    assert buttons.total == 5
    assert buttons.with_accessible_name == 4
    assert buttons.with_aria_labels == 1
    assert buttons.with_disabled_state == 1
    assert buttons.types == ["button", "reset", "role-button", "submit"]

    missing = findings.accessibility.missing_aria_labels
    assert any(item.startswith("Button without accessible name") for item in missing)
    assert any(item.startswith("Link without accessible name") for item in missing)


def test_div_soup_score():
    html = "<header></header><main>" + "<div></div>" * 5 + "<span></span></main>"
    semantic = analyze_structure(html).semantic_html
    assert semantic.uses_semantic_tags
    assert semantic.semantic_tag_count == 2
    assert semantic.generic_container_count == 6
    assert semantic.div_soup_score == 3.0


def test_div_soup_without_semantic_tags_is_generic_count():
    semantic = analyze_structure("<div><div><span>x</span></div></div>").semantic_html
    assert not semantic.uses_semantic_tags
    assert semantic.div_soup_score == 3.0


def test_landmarks_from_elements_and_roles():
    html = '<header></header><div role="main"></div><footer></footer>'
    findings = analyze_structure(html)
    landmarks = findings.accessibility.landmark_roles
    assert landmarks.present == ["banner", "main", "contentinfo"]
    assert landmarks.missing == ["navigation", "complementary"]
    assert findings.semantic_html.missing_landmarks == landmarks.missing


def test_heading_skips():
    html = "<h1>A</h1><h2>B</h2><h4>C</h4><h2>D</h2><h5>E</h5>"
    headings = analyze_structure(html).accessibility.heading_structure
    assert headings.hierarchy == [1, 2, 4, 2, 5]
    assert headings.issues == [
        "Heading level skipped: h2 to h4",
        "Heading level skipped: h2 to h5",
    ]


@pytest.mark.parametrize("html", ["", "   ", None, "<<<>>><div", "<p><b>unclosed"])
def test_malformed_or_empty_markup_never_raises(html):
    findings = analyze_structure(html)
    assert findings.buttons.total == 0
    assert findings.accessibility.missing_alt_text == []
    assert findings.forms.inputs == []


def test_empty_markup_reports_all_landmarks_missing():
    findings = analyze_structure("")
    assert findings.accessibility.landmark_roles.missing == [
        "banner", "navigation", "main", "complementary", "contentinfo"
    ]


def test_deterministic_and_camel_case_dict():
    html = '<nav><a href="/">Home</a></nav><img src="x.png">'
    first = StructuralAnalyzer().analyze(html, "Home page words here")
    second = StructuralAnalyzer().analyze(html, "Home page words here")
    assert first == second
    assert first.content_word_count == 4

    data = first.to_dict()
    assert "missingAltText" in data["accessibility"]
    assert "divSoupScore" in data["semanticHtml"]
    assert data["navigation"]["primaryNav"]["type"] == "semantic"
