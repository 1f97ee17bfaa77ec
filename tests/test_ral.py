import pytest

from utils.ral import RAL_COLORS, hex_to_ral, normalize_hex, ral_to_hex


@pytest.mark.parametrize("raw, expected", [
    ("#fff", "#FFFFFF"),
    ("FFFFFF", "#FFFFFF"),
    (" #383e42 ", "#383E42"),
    ("#12345", None),
    ("blue", None),
    ("", None),
    (None, None),
])
def test_normalize_hex(raw, expected):
    assert normalize_hex(raw) == expected


def test_exact_colour_maps_to_its_code():
    for code, hex_color in RAL_COLORS.items():
        assert hex_to_ral(hex_color) == code


def test_nearest_code():
    assert hex_to_ral("#fff") == "RAL 9016"
    assert hex_to_ral("#000000") == "RAL 9005"
    assert hex_to_ral("#3a3f44") == "RAL 7016"


def test_invalid_hex_has_no_code():
    assert hex_to_ral("#zzzzzz") is None
    assert hex_to_ral(None) is None


def test_ral_to_hex():
    assert ral_to_hex("RAL 9016") == "#F1F0EA"
    assert ral_to_hex("RAL 0000") is None
