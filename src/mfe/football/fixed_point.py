from __future__ import annotations

PERCENT = 100
PER_MILLE = 1000


def tdiv(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    if denominator == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def scale(value: int, factor: int, base: int) -> int:
    return tdiv(value * factor, base)
