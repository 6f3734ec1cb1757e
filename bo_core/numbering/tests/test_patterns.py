from datetime import date

import pytest

from bo_core.numbering.patterns import InvalidPattern, default_pattern, period_key, preview, render, validate_pattern

MARCH_15 = date(2024, 3, 15)


@pytest.mark.parametrize(
    "pattern",
    ["ORD[YY][3DIGIT][MM][DD]", "[MM][4DIGIT][YY][DD]", "[4DIGIT]", "INV-[YYYY]-[8DIGIT]", "[2DIGIT]"],
)
def test_valid_patterns(pattern):
    validate_pattern(pattern)


@pytest.mark.parametrize(
    "pattern, reason",
    [
        ("ORD[YY]", "Format must contain one sequence placeholder like [4DIGIT]"),
        ("[3DIGIT]-[4DIGIT]", "Format can only contain one sequence placeholder"),
        ("ORD[YY][3DIGIT][HH]", "Unknown placeholder [HH]"),
        ("[1DIGIT]", "Unknown placeholder [1DIGIT]"),
        ("[9DIGIT]", "Unknown placeholder [9DIGIT]"),
        ("", "Format cannot be empty"),
    ],
)
def test_invalid_patterns_carry_reason(pattern, reason):
    with pytest.raises(InvalidPattern) as exc:
        validate_pattern(pattern)
    assert str(exc.value) == reason


@pytest.mark.parametrize(
    "pattern, key",
    [
        ("ORD[YY][3DIGIT][MM][DD]", "240315"),
        ("ORD[YY][3DIGIT]", "24"),
        ("[YYYY]-[MM]-[4DIGIT]", "202403"),
        ("[DD][MM][YYYY][3DIGIT]", "20240315"),
        ("[4DIGIT]", "2024"),
        ("[MM][4DIGIT]", "03"),
    ],
)
def test_period_key(pattern, key):
    assert period_key(pattern, MARCH_15) == key


def test_render_pads_and_never_truncates():
    assert render("ORD[YY][3DIGIT][MM][DD]", MARCH_15, 1) == "ORD240010315"
    assert render("ORD[YY][3DIGIT]", MARCH_15, 1234) == "ORD241234"
    assert render("INV-[YYYY]-[8DIGIT]", MARCH_15, 42) == "INV-2024-00000042"


def test_preview_uses_sequence_42():
    assert preview("ORD[YY][3DIGIT][MM][DD]", day=MARCH_15) == "ORD240420315"


def test_preview_validates_first():
    with pytest.raises(InvalidPattern):
        preview("ORD[YY]", day=MARCH_15)


def test_defaults():
    assert default_pattern("order") == "ORD[YY][3DIGIT][MM][DD]"
    assert default_pattern("invoice") == "[MM][4DIGIT][YY][DD]"
    assert default_pattern("quote") == "[MM][4DIGIT][YY][DD]"
    assert default_pattern("shipment") == "[4DIGIT]"
