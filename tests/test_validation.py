import itertools

import pytest

from fakes import make_violation
from heuristic_auditor.analyzer.heuristics import Heuristic, Severity
from heuristic_auditor.analyzer.validation import CrossValidator, is_similar, title_similarity


def words(*indexes):
    vocabulary = "alpha bravo charlie delta echo foxtrot golf hotel india".split()
    return " ".join(vocabulary[i - 1] for i in indexes)


def test_title_similarity():
    assert title_similarity("Save button is hidden", "save BUTTON is   hidden") == 1.0
    assert title_similarity(words(1, 2, 3, 4, 5, 6, 7), words(2, 3, 4, 5, 6, 7, 8)) == 0.75
    assert title_similarity("", "") == 0.0


def test_similarity_requires_shared_place():
    first = make_violation()
    moved = make_violation(location="Cart page", page_element="Cart total")
    assert is_similar(first, make_violation(location="Elsewhere"))
    assert not is_similar(first, moved)


def test_exact_duplicates_removed():
    original = make_violation()
    duplicate = make_violation(heuristic=Heuristic.ERROR_PREVENTION, severity=Severity.LOW)
    result = CrossValidator().validate([original, duplicate])

    assert result.validated == [original]
    assert result.duplicates_removed == 1
    assert result.false_positives_removed == 0


def key(violation):
    return (violation.title, violation.location, violation.page_element)


def distinct_candidates():
    checkout = make_violation()
    coupon = make_violation(
        title="Coupon field has no visible label text",
        location="Checkout form, middle",
        page_element="Coupon field",
    )
    shipping = make_violation(
        title="Shipping costs appear only after payment details",
        location="Order summary",
        page_element="Shipping line",
    )
    return [
        checkout,
        make_violation(heuristic=Heuristic.ERROR_PREVENTION, severity=Severity.LOW),
        coupon,
        make_violation(
            title=coupon.title, location=coupon.location, page_element=coupon.page_element,
            description="The coupon box relies on placeholder text that disappears while typing",
        ),
        shipping,
    ]


def test_exact_duplicate_keys_do_not_depend_on_order():
    validator = CrossValidator()
    candidates = distinct_candidates()
    expected = {key(v) for v in candidates}
    assert len(expected) == 3

    for order in itertools.permutations(candidates):
        assert {key(v) for v in validator.remove_duplicates(order)} == expected
        result = validator.validate(order)
        assert {key(v) for v in result.validated} == expected
        assert result.duplicates_removed == 2


def test_near_duplicate_survivor_follows_order():
    # The first occurrence of an exact duplicate wins, so the merge sees a
    # different cluster in each order (ties: test_equal_severity_keeps_earliest)
    first = make_violation()
    reworded = make_violation(title="Place order button gives no visual feedback")
    repeat = make_violation(severity=Severity.LOW)

    forward = CrossValidator().validate([first, reworded, repeat])
    backward = CrossValidator().validate([repeat, reworded, first])

    assert forward.validated == [first]
    assert backward.validated == [reworded]
    assert forward.duplicates_removed == backward.duplicates_removed == 1
    assert forward.merged == backward.merged == 1


@pytest.mark.parametrize("overrides", [
    {"description": "The layout could be improved for clarity on the checkout step"},
    {"title": "Overall the checkout feels slow"},
    {"recommendation": "ok", "description": "You may want to rethink the button"},
    {"title": "Missing loading feedback"},
    {"page_element": "General"},
    {"page_element": " unknown "},
    {"page_element": ""},
    {"severity": Severity.HIGH, "bounding_box": None},
])
def test_low_confidence_rejected(overrides):
    result = CrossValidator().validate([make_violation(**overrides)])
    assert result.validated == []
    assert result.false_positives_removed == 1


def test_hedging_only_checked_in_title_description_location_element():
    kept = make_violation(recommendation="Consider adding a spinner while the order submits")
    assert CrossValidator().validate([kept]).validated == [kept]


def test_medium_without_bounding_box_is_kept():
    kept = make_violation(bounding_box=None)
    assert CrossValidator().validate([kept]).validated == [kept]


def test_technical_filter_is_opt_in():
    technical = make_violation(title="Checkout page is missing a viewport meta tag")
    assert CrossValidator().validate([technical]).validated == [technical]

    result = CrossValidator(reject_technical=True).validate([technical])
    assert result.validated == []
    assert result.false_positives_removed == 1


def test_similar_high_and_low_keep_high():
    low = make_violation(severity=Severity.LOW, title="Place order button gives no visual feedback")
    high = make_violation(severity=Severity.HIGH)
    result = CrossValidator().validate([low, high])

    assert result.validated == [high]
    assert result.merged == 1


def test_equal_severity_keeps_earliest():
    first = make_violation()
    second = make_violation(title="Place order button gives no visual feedback")
    assert CrossValidator().validate([first, second]).validated == [first]
    assert CrossValidator().validate([second, first]).validated == [second]


def test_merge_is_transitive_and_keeps_cluster_position():
    a = make_violation(severity=Severity.LOW, title=words(1, 2, 3, 4, 5, 6, 7))
    other = make_violation(
        title="Shipping costs appear only after payment details",
        location="Order summary",
        page_element="Shipping line",
    )
    b = make_violation(severity=Severity.MEDIUM, title=words(2, 3, 4, 5, 6, 7, 8))
    c = make_violation(severity=Severity.HIGH, title=words(3, 4, 5, 6, 7, 8, 9))
    assert not is_similar(a, c)

    result = CrossValidator().validate([a, other, b, c])

    assert result.validated == [c, other]
    assert result.merged == 2


def test_validation_is_idempotent():
    candidates = [
        make_violation(severity=Severity.LOW, title=words(1, 2, 3, 4, 5, 6, 7)),
        make_violation(severity=Severity.MEDIUM, title=words(2, 3, 4, 5, 6, 7, 8)),
        make_violation(severity=Severity.HIGH, title=words(3, 4, 5, 6, 7, 8, 9)),
        make_violation(title="Coupon field has no visible label text", page_element="Coupon field",
                       location="Checkout form, middle"),
        make_violation(page_element="General"),
    ]
    validator = CrossValidator()
    once = validator.validate(candidates).validated
    twice = validator.validate(once)

    assert twice.validated == once
    assert twice.duplicates_removed == twice.false_positives_removed == twice.merged == 0


def test_strengths_are_not_inputs():
    result = CrossValidator().validate([])
    assert result.validated == []
    assert (result.duplicates_removed, result.false_positives_removed, result.merged) == (0, 0, 0)


@pytest.mark.parametrize("overrides", [
    {"research_backing": "NN/g"},
    {"research_backing": "   Nielsen 1994    "},
    {"user_impact": "Confusing"},
])
def test_evidence_filter_is_opt_in(overrides):
    thin = make_violation(**overrides)
    assert CrossValidator().validate([thin]).validated == [thin]

    result = CrossValidator(require_evidence=True).validate([thin])
    assert result.validated == []
    assert result.false_positives_removed == 1


def test_evidence_filter_keeps_cited_findings():
    cited = make_violation()
    assert CrossValidator(require_evidence=True).validate([cited]).validated == [cited]
