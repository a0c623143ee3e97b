from decimal import Decimal, InvalidOperation

from sparkbooks.settings import settings


def format_money(amount: Decimal | int | None) -> str:
    """Format a money value for display: Decimal('2850.5') -> '$2,850.50'"""
    value = Decimal(amount or 0).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    return f"{sign}{settings.currency_symbol}{abs(value):,.2f}"


def parse_money(text: str) -> Decimal | None:
    """Parse a typed amount into a Decimal. Returns None on invalid input.

    Accepts formats like '2850', '2850.00', '$2,850.00'.
    """
    text = text.strip().replace(settings.currency_symbol, "").replace(",", "").strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def format_quantity(quantity: Decimal) -> str:
    """Drop trailing zeros: Decimal('2.500') -> '2.5', Decimal('100') -> '100'"""
    return f"{Decimal(quantity).normalize():f}"
