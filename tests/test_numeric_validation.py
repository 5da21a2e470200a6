import pytest

from sellerfin.services.numeric_validation import (
    ValidationError,
    format_currency,
    format_decimal_br,
    parse_batch_cost_input,
    parse_currency_input,
    parse_numeric_input,
    parse_numeric_input_safe,
    parse_percentage_input,
    strip_currency_prefix,
)


@pytest.mark.parametrize("text, expected", [
    ("35,50", 35.5),
    ("35.50", 35.5),
    ("1.234,56", 1234.56),
    ("1,234.56", 1234.56),
    ("  42 ", 42.0),
    ("", 0.0),
    (None, 0.0),
])
def test_parse_accepts_brazilian_and_plain_notation(text, expected):
    assert parse_numeric_input(text) == pytest.approx(expected)


def test_parse_rejects_letters():
    with pytest.raises(ValidationError) as exc:
        parse_numeric_input("12a")
    assert exc.value.message == "Formato inválido. Use apenas números."


def test_parse_rejects_negative_unless_allowed():
    with pytest.raises(ValidationError):
        parse_numeric_input("-5")
    assert parse_numeric_input("-5", min_value=None, allow_negative=True) == -5


def test_parse_limits_decimal_places():
    with pytest.raises(ValidationError) as exc:
        parse_numeric_input("1,234")
    assert "casas decimais" in exc.value.message


def test_parse_enforces_bounds():
    with pytest.raises(ValidationError) as exc:
        parse_numeric_input("1000000")
    assert exc.value.message.startswith("Valor máximo")


def test_safe_variant_returns_zero():
    assert parse_numeric_input_safe("abc") == 0.0
    assert parse_numeric_input_safe("12,5") == 12.5


def test_percentage_is_returned_as_fraction():
    assert parse_percentage_input("14") == pytest.approx(0.14)
    assert parse_percentage_input("6,5") == pytest.approx(0.065)
    with pytest.raises(ValidationError):
        parse_percentage_input("101")


def test_currency_allows_four_decimals():
    assert parse_currency_input("12,3456") == pytest.approx(12.3456)


def test_batch_cost_must_be_positive():
    with pytest.raises(ValidationError) as exc:
        parse_batch_cost_input("0")
    assert exc.value.message == "Valor deve ser maior que zero."
    assert parse_batch_cost_input("9,90") == pytest.approx(9.9)


def test_strip_currency_prefix():
    assert strip_currency_prefix("BRL 35,91") == "35,91"
    assert strip_currency_prefix("R$ 10") == "10"


def test_brazilian_formatting():
    assert format_decimal_br(1234.5) == "1.234,50"
    assert format_currency(-10) == "-R$ 10,00"


@pytest.mark.parametrize("value", [0.01, 12.5, 35.9, 1234.56, 1000000, 9999999.99])
def test_formatted_value_parses_back(value):
    assert parse_currency_input(format_decimal_br(value)) == pytest.approx(value)
    assert parse_currency_input(strip_currency_prefix(format_currency(value))) == pytest.approx(value)


def test_four_decimal_costs_survive_formatting():
    assert parse_currency_input(format_decimal_br(12.3456, places=4)) == pytest.approx(12.3456)
