"""
Rate Desk - Calculation Engine
Pure functions from role + location + hours + margin to rates, margins and
totals. Two variants share the per-location cost lookup:

    desired margin -> client rate   (cost-forward, multi-position)
    fixed client rate -> margin     (rate-backward, checked against a target)
"""

import logging
import math
from enum import Enum
from typing import Callable, Dict, Iterable

from rate_desk.utils.errors import ValidationError
from rate_desk.utils.models import (
    LOCATIONS, CalculationInput, DesiredMarginResult, LocationQuote,
    Position, PositionSummary, RateTable, RoleRecord, TargetMarginResult,
)
from rate_desk.utils.recommendation import recommend

logger = logging.getLogger(__name__)


class CalculatorMode(str, Enum):
    DESIRED_MARGIN = 'desired_margin'
    TARGET_MARGIN = 'target_margin'


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def _to_float(value, field_name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def build_input(role, location, hours, margin) -> CalculationInput:
    """Validate raw form values. Raises ValidationError before any computation."""
    role = str(role).strip() if role is not None else ''
    if not role:
        raise ValidationError("Role is required")
    if location not in LOCATIONS:
        raise ValidationError(f"Location must be one of {', '.join(LOCATIONS)}")

    hours = _to_float(hours, "Hours")
    if hours <= 0:
        raise ValidationError("Hours must be greater than 0")

    margin = _to_float(margin, "Margin")
    if not 0 <= margin < 1:
        raise ValidationError("Margin must be at least 0% and below 100%")

    return CalculationInput(role=role, location=location, hours=hours, margin=margin)


def validate_input(inp: CalculationInput) -> CalculationInput:
    """Re-check an input that did not come through build_input."""
    return build_input(inp.role, inp.location, inp.hours, inp.margin)


# =============================================================================
# SHARED HELPERS
# =============================================================================

def client_rate_for(cost: float, desired_margin: float) -> float:
    """Rate that yields desired_margin on cost. Locations with no cost bill 0."""
    if cost <= 0:
        return 0.0
    return cost / (1 - desired_margin)


def margin_for(client_rate: float, cost: float) -> float:
    """(rate - cost) / rate, 0 when there is no rate."""
    if client_rate <= 0:
        return 0.0
    return (client_rate - cost) / client_rate


def _per_location(record: RoleRecord,
                  quote: Callable[[float], LocationQuote]) -> Dict[str, LocationQuote]:
    return {loc: quote(record.cost_for(loc)) for loc in LOCATIONS}


# =============================================================================
# MODE A - DESIRED MARGIN
# =============================================================================

def calculate_desired_margin(record: RoleRecord, inp: CalculationInput) -> DesiredMarginResult:
    """Client rate per location from the desired margin; total = hours x selected rate."""
    inp = validate_input(inp)

    def quote(cost):
        rate = client_rate_for(cost, inp.margin)
        return LocationQuote(cost=cost, client_rate=rate, margin=margin_for(rate, cost))

    comparison = _per_location(record, quote)
    selected = comparison[inp.location]
    return DesiredMarginResult(
        role=record.role,
        selected_location=inp.location,
        selected_cost=selected.cost,
        selected_client_rate=selected.client_rate,
        desired_margin=inp.margin,
        hours=inp.hours,
        total_cost=inp.hours * selected.client_rate,
        comparison=comparison,
    )


def summarize_positions(positions: Iterable[Position]) -> PositionSummary:
    """
    Aggregate across positions.

    The average client rate and average desired margin are plain means over
    positions (not hours-weighted). What-if totals re-apply each position's own
    desired margin to every location's cost. Achieved margins average only the
    positions whose rate at that location is positive.
    """
    positions = list(positions)
    if not positions:
        return PositionSummary()

    count = len(positions)
    totals = {loc: 0.0 for loc in LOCATIONS}
    margin_sums = {loc: 0.0 for loc in LOCATIONS}
    margin_counts = {loc: 0 for loc in LOCATIONS}

    for p in positions:
        for loc in LOCATIONS:
            cost = p.record.cost_for(loc)
            rate = client_rate_for(cost, p.input.margin)
            totals[loc] += p.input.hours * rate
            if rate > 0:
                margin_sums[loc] += margin_for(rate, cost)
                margin_counts[loc] += 1

    return PositionSummary(
        total_positions=count,
        total_hours=sum(p.input.hours for p in positions),
        avg_client_rate=sum(p.result.selected_client_rate for p in positions) / count,
        avg_desired_margin=sum(p.input.margin for p in positions) / count,
        total_selected=sum(p.result.total_cost for p in positions),
        location_totals=totals,
        location_margins={
            loc: margin_sums[loc] / margin_counts[loc] if margin_counts[loc] else 0.0
            for loc in LOCATIONS
        },
    )


# =============================================================================
# MODE B - TARGET MARGIN
# =============================================================================

def calculate_target_margin(record: RoleRecord, inp: CalculationInput) -> TargetMarginResult:
    """Margin per location at the role's fixed client rate; total = hours x selected cost."""
    inp = validate_input(inp)
    client_rate = record.client_rate
    if client_rate is None or client_rate <= 0:
        raise ValidationError(f"Role '{record.role}' has no client rate to evaluate")

    def quote(cost):
        margin = margin_for(client_rate, cost)
        return LocationQuote(cost=cost, client_rate=client_rate, margin=margin,
                             meets_target=margin >= inp.margin and cost > 0)

    comparison = _per_location(record, quote)
    selected = comparison[inp.location]
    meets = {loc: q.meets_target for loc, q in comparison.items()}
    margins = {loc: q.margin for loc, q in comparison.items()}

    return TargetMarginResult(
        role=record.role,
        selected_location=inp.location,
        selected_cost=selected.cost,
        client_rate=client_rate,
        selected_margin=selected.margin,
        target_margin=inp.margin,
        hours=inp.hours,
        total_cost=inp.hours * selected.cost,
        comparison=comparison,
        recommendation=recommend(meets, margins, inp.margin),
    )


# =============================================================================
# DISPATCH
# =============================================================================

_STRATEGIES = {
    CalculatorMode.DESIRED_MARGIN: calculate_desired_margin,
    CalculatorMode.TARGET_MARGIN: calculate_target_margin,
}


def calculate(table: RateTable, inp: CalculationInput, mode: CalculatorMode):
    """Look up the role (RoleNotFoundError if absent) and run the mode's variant."""
    inp = validate_input(inp)
    record = table.find(inp.role)
    mode = CalculatorMode(mode)
    result = _STRATEGIES[mode](record, inp)
    logger.debug("Calculated %s for %s/%s: total %.2f", mode.value, inp.role, inp.location, result.total_cost)
    return result
