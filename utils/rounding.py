"""
Half-up rounding helpers shared by the analysis services
"""
import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet does: 2.5 -> 3, 0.125 -> 0.13"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_hours(seconds: float) -> float:
    return round_half_up(seconds / 3600, 2)


def percentage(part: float, whole: float) -> int:
    """Whole-number percentage of part in whole, 0 when whole is empty"""
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))


def format_number(value: float) -> str:
    """Render 40.0 as '40' and 12.5 as '12.5'"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
