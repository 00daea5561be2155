from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[int, float, Decimal]


def format_price(value: Optional[Number], include_decimals: bool = True) -> str:
    """Argentine format: ``.`` groups thousands, ``,`` separates decimals (1234.5 -> 1.234,50)."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        amount = Decimal(0)
    if value is None or not amount.is_finite():
        amount = Decimal(0)

    places = Decimal("0.01") if include_decimals else Decimal(1)
    amount = amount.quantize(places, rounding=ROUND_HALF_UP)

    text = f"{amount:,.2f}" if include_decimals else f"{amount:,.0f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_price_with_symbol(value: Optional[Number], include_decimals: bool = True) -> str:
    return f"${format_price(value, include_decimals)}"


def parse_price(text: Optional[str]) -> float:
    if not text:
        return 0.0

    clean = text.replace("$", "").strip().replace(".", "").replace(",", ".")
    try:
        return float(clean)
    except ValueError:
        return 0.0
