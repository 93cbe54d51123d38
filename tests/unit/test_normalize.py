import pytest

from sous_chef.core.normalize import normalize_label, normalize_unit


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Olive  Oil!", "olive oil"),
        ("  Chicken\tBreast \n", "chicken breast"),
        ("Extra-Virgin", "extra-virgin"),
        ("all_purpose flour", "all_purpose flour"),
        ("Salt & Pepper", "salt pepper"),
        ("salt !", "salt"),
        ("!!!", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_label(raw, expected):
    assert normalize_label(raw) == expected


def test_normalize_label_ignores_case_whitespace_and_punctuation():
    assert normalize_label("Olive  Oil!") == normalize_label("olive oil")


@pytest.mark.parametrize("raw", ["Olive  Oil!", "a ! b", "  Crème fraîche, chilled. ", "x  y", "-", "İstanbul"])
def test_normalize_label_is_idempotent(raw):
    once = normalize_label(raw)
    assert normalize_label(once) == once


def test_normalize_label_keeps_unicode_letters():
    assert normalize_label("Crème Fraîche") == "crème fraîche"


def test_normalize_unit():
    assert normalize_unit(" Grams ") == "g"
    assert normalize_unit("Cups") == "cup"
    assert normalize_unit("tbsp.") == "tbsp"
    assert normalize_unit("pinch") == "pinch"
    assert normalize_unit("   ") is None
    assert normalize_unit(None) is None
