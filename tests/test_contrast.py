import pytest

from heuristic_auditor.analyzer.contrast import contrast_ratio, parse_color, wcag_level


@pytest.mark.parametrize("value,expected", [
    ("#FFF", "#ffffff"),
    ("#0055ff", "#0055ff"),
    ("0055FF", "#0055ff"),
    ("#0055ff80", "#0055ff"),
    ("rgb(255, 0, 0)", "#ff0000"),
    ("rgba(0, 128, 0, 0.5)", "#008000"),
    ("White", "#ffffff"),
    ("  grey ", "#808080"),
])
def test_parse_color(value, expected):
    assert parse_color(value) == expected


@pytest.mark.parametrize("value", [None, "", "transparent", "#12", "hsl(0, 0%, 0%)", 42])
def test_parse_color_rejects_unknown(value):
    assert parse_color(value) is None


def test_contrast_extremes():
    assert contrast_ratio("#000000", "#ffffff") == 21.0
    assert contrast_ratio("white", "black") == 21.0
    assert contrast_ratio("#777777", "#777777") == 1.0


def test_contrast_ratio_is_symmetric():
    assert contrast_ratio("#0055ff", "#ffffff") == contrast_ratio("#ffffff", "#0055ff")


def test_light_gray_on_white_fails_aa():
    ratio = contrast_ratio("#cccccc", "#ffffff")
    assert ratio < 4.5
    assert wcag_level(ratio) == "fail"


def test_contrast_with_unparsable_color():
    assert contrast_ratio("not-a-color", "#ffffff") is None


@pytest.mark.parametrize("ratio,level", [
    (21.0, "AAA"),
    (7.0, "AAA"),
    (4.5, "AA"),
    (3.0, "AA-large"),
    (2.99, "fail"),
])
def test_wcag_level(ratio, level):
    assert wcag_level(ratio) == level
