"""
Numeric input validation for financial fields.

Accepts Brazilian (1.234,56) and plain (35,50 / 35.50) notations. Strict
parsers raise ValidationError with a message ready to be shown next to the
field; the *_safe variant returns 0 instead, for live typing.

The format_* helpers produce the same notation the parsers accept, so a value
shown to the user can be submitted back unchanged.
"""
import re
from typing import Optional

NUMERIC_PATTERN = re.compile(r"^-?\d+\.?\d*$")
CURRENCY_PREFIX = re.compile(r"^(BRL|R\$)\s*", re.IGNORECASE)

CURRENCY_MAX = 9999999.99
QUANTITY_MAX = 999999


class ValidationError(ValueError):
    """Invalid user-provided numeric value"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def normalize_numeric_text(text: str) -> str:
    """Turn a locale-formatted number into plain dot-decimal notation"""
    last_comma = text.rfind(",")
    last_dot = text.rfind(".")

    if last_comma > last_dot:
        # 1.234,56 / 35,50 -> comma is the decimal point
        return text.replace(".", "").replace(",", ".")
    if last_dot > last_comma:
        # 1,234.56 / 35.50 -> commas are thousands separators
        return text.replace(",", "")
    return text


def strip_currency_prefix(text: str) -> str:
    """'BRL 35,91' / 'R$ 35,91' -> '35,91'"""
    return CURRENCY_PREFIX.sub("", text.strip()).strip()


def parse_numeric_input(
    value: Optional[str],
    min_value: Optional[float] = 0,
    max_value: Optional[float] = 999999.99,
    allow_negative: bool = False,
    max_decimal_places: Optional[int] = 2,
) -> float:
    """
    Parse and validate a numeric string.

    Empty input is valid and yields 0 ("field not filled yet").
    Raises ValidationError on bad format, too many decimals or out of bounds.
    """
    trimmed = (value or "").strip()
    if trimmed == "":
        return 0.0

    cleaned = normalize_numeric_text(trimmed)

    if not NUMERIC_PATTERN.match(cleaned) or (cleaned.startswith("-") and not allow_negative):
        raise ValidationError("Formato inválido. Use apenas números.")

    if max_decimal_places is not None and "." in cleaned:
        decimals = cleaned.split(".", 1)[1]
        if len(decimals) > max_decimal_places:
            raise ValidationError(f"Máximo de {max_decimal_places} casas decimais.")

    number = float(cleaned)

    if min_value is not None and number < min_value:
        raise ValidationError(f"Valor mínimo: {min_value}")
    if max_value is not None and number > max_value:
        raise ValidationError(f"Valor máximo: {max_value}")

    return number


def parse_numeric_input_safe(value: Optional[str], **options) -> float:
    """Same as parse_numeric_input but returns 0 for any invalid input"""
    try:
        return parse_numeric_input(value, **options)
    except ValidationError:
        return 0.0


def parse_currency_input(value: Optional[str]) -> float:
    return parse_numeric_input(value, min_value=0, max_value=CURRENCY_MAX, max_decimal_places=4)


def parse_percentage_input(value: Optional[str]) -> float:
    """0-100 input returned as a 0-1 fraction"""
    return parse_numeric_input(value, min_value=0, max_value=100, max_decimal_places=2) / 100


def parse_quantity_input(value: Optional[str]) -> float:
    return parse_numeric_input(value, min_value=0, max_value=QUANTITY_MAX, max_decimal_places=4)


def parse_batch_cost_input(value: Optional[str]) -> float:
    """Currency that must be strictly positive (applied to many products at once)"""
    number = parse_currency_input(value)
    if number <= 0:
        raise ValidationError("Valor deve ser maior que zero.")
    return number


def format_decimal_br(value: float, places: int = 2) -> str:
    """1234.5 -> '1.234,50'"""
    text = f"{value:,.{places}f}"
    return text.translate(str.maketrans({",": ".", ".": ","}))


def format_currency(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {format_decimal_br(abs(value))}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"
