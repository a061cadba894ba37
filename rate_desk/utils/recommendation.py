"""
Rate Desk - Recommendation Rule
Turns the per-location target checks into a one-line verdict.
"""

from typing import Dict

from rate_desk.utils.formatting import format_percentage, format_whole_percentage
from rate_desk.utils.models import LOCATIONS, LOCATION_LABELS


def recommend(meets_target: Dict[str, bool], margins: Dict[str, float],
              target_margin: float) -> str:
    """
    Classify by how many locations meet the target margin.

    0 -> advise revisiting the deal
    1 -> name the single qualifying location and its margin
    2 -> list both, leave the choice to other requirements
    3 -> name the location with the strictly highest margin
         (ties go to the first in onshore, offshore, nearshore order)
    """
    target = format_whole_percentage(target_margin)
    qualifying = [loc for loc in LOCATIONS if meets_target.get(loc)]

    if not qualifying:
        return (f"No location meets the {target} target margin. "
                f"Consider revisiting the client rate or the staffing mix.")

    if len(qualifying) == len(LOCATIONS):
        best = qualifying[0]
        for loc in qualifying[1:]:
            if margins[loc] > margins[best]:
                best = loc
        return (f"All locations meet the {target} target margin. "
                f"{LOCATION_LABELS[best]} offers the best margin at "
                f"{format_percentage(margins[best])}.")

    if len(qualifying) == 1:
        loc = qualifying[0]
        return (f"Only {LOCATION_LABELS[loc]} meets the {target} target margin "
                f"at {format_percentage(margins[loc])}.")

    first, second = qualifying
    return (f"{LOCATION_LABELS[first]} and {LOCATION_LABELS[second]} both meet the "
            f"{target} target margin. Choose based on other requirements.")
