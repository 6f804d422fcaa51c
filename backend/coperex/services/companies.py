from datetime import datetime
from typing import Any, Dict, Optional


def years_since_founding(founding_year: int, current_year: Optional[int] = None) -> int:
    """Years of trajectory derived from a founding year.

    >>> years_since_founding(2005, current_year=2023)
    18
    """
    if current_year is None:
        current_year = datetime.now().year
    if founding_year > current_year:
        raise ValueError("founding year is in the future")
    return current_year - founding_year


def resolve_years_trajectory(data: Dict[str, Any], current_year: Optional[int] = None) -> Optional[int]:
    """Pick the trajectory for a create/update payload.

    A direct ``yearsTrajectory`` wins over ``foundingYear``; None when neither
    is present.
    """
    if data.get("yearsTrajectory") is not None:
        return data["yearsTrajectory"]
    if data.get("foundingYear") is not None:
        return years_since_founding(data["foundingYear"], current_year)
    return None
