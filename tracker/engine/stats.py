"""
Cosmetic counters shown next to the map, proportional to route progress.
"""

from datetime import datetime

SANTA_TOTAL_GIFTS = 8_500_000_000

REYES_TOTALS = {
    "gifts":   2_500_000_000,
    "candies": 5_000_000_000,
    "stars":   1_000_000,
}

# per-King multipliers on (gifts, candies, stars)
REYES_FACTORS = {
    "melchor":  (0.95, 0.90, 1.00),
    "gaspar":   (1.02, 1.10, 0.85),
    "baltasar": (1.03, 1.00, 1.15),
}


def overall_fraction(now: datetime, start: datetime, end: datetime) -> float:
    if end <= start:
        return 1.0 if now >= end else 0.0
    return max(0.0, min(1.0, (now - start) / (end - start)))


def traveler_stats(key: str, now: datetime, start: datetime, end: datetime) -> dict[str, int]:
    """
    Counters for one traveler at `now`.

    Santa only counts gifts; each King also counts candies and stars.
    """
    p = overall_fraction(now, start, end)
    if key not in REYES_FACTORS:
        return {"gifts": int(SANTA_TOTAL_GIFTS * p)}
    f_gifts, f_candies, f_stars = REYES_FACTORS[key]
    return {
        "gifts":   int(REYES_TOTALS["gifts"] * p * f_gifts),
        "candies": int(REYES_TOTALS["candies"] * p * f_candies),
        "stars":   int(REYES_TOTALS["stars"] * p * f_stars),
    }
