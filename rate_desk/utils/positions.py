"""
Rate Desk - Position Book
Ordered list of priced positions for one session, with its id counter.
"""

import logging
from typing import List, Optional, Tuple

from rate_desk.utils.models import (
    CalculationInput, Position, PositionSummary, RateTable,
)
from rate_desk.utils.rate_engine import (
    build_input, calculate_desired_margin, summarize_positions, validate_input,
)

logger = logging.getLogger(__name__)


class PositionBook:
    """Owns the positions and the sequential id counter."""

    def __init__(self):
        self._positions: List[Position] = []
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self):
        return iter(self._positions)

    @property
    def positions(self) -> Tuple[Position, ...]:
        return tuple(self._positions)

    def add(self, table: RateTable, inp: CalculationInput) -> Position:
        """
        Price a position and append it.
        Lookup and calculation run first, so a failure leaves the book untouched.
        """
        inp = validate_input(inp)
        record = table.find(inp.role)
        result = calculate_desired_margin(record, inp)
        self._last_id += 1
        position = Position(id=self._last_id, input=inp, result=result, record=record)
        self._positions.append(position)
        logger.info("Added position %d: %s (%s), %.2f total",
                    position.id, inp.role, inp.location, result.total_cost)
        return position

    def add_from_form(self, table: RateTable, role, location, hours, margin) -> Position:
        """Validate raw form values then add."""
        return self.add(table, build_input(role, location, hours, margin))

    def get(self, position_id: int) -> Optional[Position]:
        for p in self._positions:
            if p.id == position_id:
                return p
        return None

    def delete(self, position_id: int) -> bool:
        """Remove the position with this id. Returns False when there is none."""
        remaining = [p for p in self._positions if p.id != position_id]
        removed = len(remaining) != len(self._positions)
        self._positions = remaining
        if removed:
            logger.info("Deleted position %d", position_id)
        return removed

    def clear(self):
        """Remove every position. Ids keep counting up."""
        self._positions = []

    def summary(self) -> PositionSummary:
        return summarize_positions(self._positions)
