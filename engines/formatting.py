"""
Service ROI Calculator — Display Formatting
pt-BR number formatting: '.' thousands, ',' decimals, BRL currency prefix.
Ties round away from zero, as browsers do for pt-BR.
"""
import math
from decimal import Decimal, ROUND_HALF_UP

CURRENCY_PREFIX = 'R$\xa0'  # no-break space, as browsers render pt-BR BRL


def _swap_separators(text):
    return text.replace(',', 'X').replace('.', ',').replace('X', '.')


def _quantize(v, decimals):
    # repr() is the shortest decimal that round-trips, so 0.125 stays a tie
    return Decimal(repr(v)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_brl(value):
    v = float(value)
    if math.isnan(v):
        return f"{CURRENCY_PREFIX}NaN"
    sign = '-' if v < 0 else ''
    if math.isinf(v):
        return f"{sign}{CURRENCY_PREFIX}∞"
    q = _quantize(abs(v), 2)
    return f"{sign}{CURRENCY_PREFIX}{_swap_separators(f'{q:,.2f}')}"


def format_number(value, decimals=0):
    v = float(value)
    if not math.isfinite(v):
        return str(v)
    q = _quantize(v, decimals)
    return _swap_separators(f"{q:,.{decimals}f}")


def format_count(value):
    """Counts are shown whole when they are, otherwise with up to two decimals (28.5 -> '28,5')."""
    v = float(value)
    if not math.isfinite(v):
        return str(v)
    q = _quantize(v, 2)
    if q == q.to_integral_value():
        return format_number(v, 0)
    if q * 10 == (q * 10).to_integral_value():
        return format_number(v, 1)
    return format_number(v, 2)


def format_pct(value):
    v = float(value)
    if v.is_integer():
        return f"{int(v)}%"
    return f"{format_number(v, 1)}%"
