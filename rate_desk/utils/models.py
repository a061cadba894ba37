"""
Rate Desk - Data Model
Role records, the rate table, calculation inputs/results and positions.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from rate_desk.utils.errors import RoleNotFoundError

ONSHORE = 'onshore'
OFFSHORE = 'offshore'
NEARSHORE = 'nearshore'

# Fixed order: iteration, tie-breaks and display all follow it
LOCATIONS = (ONSHORE, OFFSHORE, NEARSHORE)

LOCATION_LABELS = {
    ONSHORE: 'Onshore',
    OFFSHORE: 'Offshore',
    NEARSHORE: 'Nearshore',
}


@dataclass(frozen=True)
class RoleRecord:
    """One rate card row. A cost of 0 means the location is not offered."""
    role: str
    onshore_cost: float = 0.0
    offshore_cost: float = 0.0
    nearshore_cost: float = 0.0
    client_rate: Optional[float] = None  # fixed-rate deployments only

    def cost_for(self, location: str) -> float:
        if location not in LOCATIONS:
            raise KeyError(f"Unknown location '{location}'")
        return getattr(self, f'{location}_cost')

    def costs(self) -> Dict[str, float]:
        return {loc: self.cost_for(loc) for loc in LOCATIONS}


@dataclass(frozen=True)
class RateTable:
    """Ordered, read-only collection of role records."""
    records: Tuple[RoleRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def roles(self) -> list:
        return [r.role for r in self.records]

    def find(self, role: str) -> RoleRecord:
        for record in self.records:
            if record.role == role:
                return record
        raise RoleNotFoundError(role)


@dataclass(frozen=True)
class CalculationInput:
    role: str
    location: str
    hours: float
    margin: float  # desired margin (mode A) or target margin (mode B)


@dataclass(frozen=True)
class LocationQuote:
    """Per-location comparison figures."""
    cost: float
    client_rate: float
    margin: float
    meets_target: Optional[bool] = None  # only set by the target-margin check


@dataclass(frozen=True)
class DesiredMarginResult:
    role: str
    selected_location: str
    selected_cost: float
    selected_client_rate: float
    desired_margin: float
    hours: float
    total_cost: float
    comparison: Dict[str, LocationQuote] = field(default_factory=dict)


@dataclass(frozen=True)
class TargetMarginResult:
    role: str
    selected_location: str
    selected_cost: float
    client_rate: float
    selected_margin: float
    target_margin: float
    hours: float
    total_cost: float
    comparison: Dict[str, LocationQuote] = field(default_factory=dict)
    recommendation: str = ''

    @property
    def meets_target(self) -> Dict[str, bool]:
        return {loc: bool(q.meets_target) for loc, q in self.comparison.items()}

    @property
    def margins(self) -> Dict[str, float]:
        return {loc: q.margin for loc, q in self.comparison.items()}


@dataclass(frozen=True)
class Position:
    id: int
    input: CalculationInput
    result: DesiredMarginResult
    record: RoleRecord


@dataclass(frozen=True)
class PositionSummary:
    total_positions: int = 0
    total_hours: float = 0.0
    avg_client_rate: float = 0.0
    avg_desired_margin: float = 0.0
    total_selected: float = 0.0
    location_totals: Dict[str, float] = field(
        default_factory=lambda: {loc: 0.0 for loc in LOCATIONS})
    location_margins: Dict[str, float] = field(
        default_factory=lambda: {loc: 0.0 for loc in LOCATIONS})
