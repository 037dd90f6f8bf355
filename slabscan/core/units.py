"""
Metric / imperial conversions and display formatting.
"""

MM_PER_INCH = 25.4


def mm_to_inches(mm: float) -> float:
    return mm / MM_PER_INCH


def inches_to_mm(inches: float) -> float:
    return inches * MM_PER_INCH


def format_distance(value_mm: float, metric: bool = True) -> str:
    """Format a distance for display, e.g. '12.35 mm' or '0.486 in'."""
    if metric:
        return f"{value_mm:.2f} mm"
    return f"{mm_to_inches(value_mm):.3f} in"


def format_feed_rate(value_mm_min: float, metric: bool = True) -> str:
    """Format a feed rate, e.g. '1000 mm/min' or '39.4 in/min'."""
    if metric:
        return f"{value_mm_min:.0f} mm/min"
    return f"{mm_to_inches(value_mm_min):.1f} in/min"


def format_area(value_mm2: float, metric: bool = True) -> str:
    """
    Format an area, switching to a larger unit when the value gets big.

    Metric: mm², dm² (>= 10 000 mm²), m² (>= 1 000 000 mm²).
    Imperial: in², ft² (>= 144 in²).
    """
    if metric:
        if value_mm2 >= 1_000_000:
            return f"{value_mm2 / 1_000_000:.2f} m²"
        if value_mm2 >= 10_000:
            return f"{value_mm2 / 10_000:.2f} dm²"
        return f"{value_mm2:.2f} mm²"

    value_in2 = value_mm2 / (MM_PER_INCH * MM_PER_INCH)
    if value_in2 >= 144:
        return f"{value_in2 / 144:.2f} ft²"
    return f"{value_in2:.2f} in²"


def convert_value(value: float, from_metric: bool, to_metric: bool) -> float:
    """Convert a length between unit systems (no-op if they match)."""
    if from_metric == to_metric:
        return value
    if from_metric:
        return mm_to_inches(value)
    return inches_to_mm(value)
