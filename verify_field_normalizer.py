import pytest

from field_normalizer import parse_quantity


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1.000,5", 1000.5),
        ("1,000.5", 1000.5),
        ("2,5", 2.5),
        ("2.5", 2.5),
        ("1,000,000.25", 1000000.25),
        ("3 pcs", 3.0),
        (4, 4.0),
    ],
)
def test_quantity_decimal_separator_is_the_last_one(value, expected) -> None:
    assert parse_quantity(value) == expected


@pytest.mark.parametrize("value", ["0", "-", "abc", "", None, True, float("nan"), -2])
def test_unusable_quantities_are_rejected(value) -> None:
    assert parse_quantity(value) is None


if __name__ == "__main__":
    assert parse_quantity("1.000,5") == 1000.5
    assert parse_quantity("1,000.5") == 1000.5
    assert parse_quantity("0") is None
    print("SUCCESS: quantities honour the last separator as the decimal point.")
