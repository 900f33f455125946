"""
Driver standings helpers
"""
from typing import Any, List


def _points(driver: Any) -> float:
    if not isinstance(driver, dict):
        return 0.0
    try:
        return float(driver.get("points") or 0)
    except (TypeError, ValueError):
        return 0.0


def rank_drivers(categories: List[Any]) -> List[Any]:
    """
    Sort drivers of every category by points (descending, ties keep their
    order) and reassign rank 1..n. Categories without a drivers list are
    returned unchanged.
    """
    ranked = []
    for category in categories:
        if not isinstance(category, dict) or not isinstance(category.get("drivers"), list):
            ranked.append(category)
            continue
        drivers = sorted(category["drivers"], key=_points, reverse=True)
        ranked.append({
            **category,
            "drivers": [
                {**driver, "rank": index + 1} if isinstance(driver, dict) else driver
                for index, driver in enumerate(drivers)
            ],
        })
    return ranked
