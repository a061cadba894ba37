"""
Rate Desk - Rate Table Store
Holds the current rate table and swaps it as a whole on refresh.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional

from rate_desk import config
from rate_desk.utils.data_loader import AcquisitionStrategy, acquire_rate_table
from rate_desk.utils.errors import DataAcquisitionError
from rate_desk.utils.models import RateTable

logger = logging.getLogger(__name__)


class RateTableStore:
    """
    Current rate table plus where and when it came from.

    Readers take the ``table`` reference once per calculation; refreshes build
    a complete new table and replace the reference under a lock. A failed
    refresh keeps whatever table was there before.
    """

    def __init__(self, strategies: List[AcquisitionStrategy],
                 refresh_interval: float = None, auto_refresh: bool = None,
                 clock: Callable[[], float] = time.monotonic):
        self.strategies = list(strategies)
        self.refresh_interval = config.REFRESH_INTERVAL if refresh_interval is None else refresh_interval
        self.auto_refresh = config.AUTO_REFRESH if auto_refresh is None else auto_refresh
        self._clock = clock
        self._lock = threading.Lock()
        self._table: Optional[RateTable] = None
        self._source: Optional[str] = None
        self._last_updated: Optional[datetime] = None
        self._attempt_tick: Optional[float] = None
        self.last_error: Optional[DataAcquisitionError] = None

    @property
    def table(self) -> RateTable:
        if self._table is None:
            self.refresh()
        return self._table

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._last_updated

    @property
    def is_loaded(self) -> bool:
        return self._table is not None

    def replace(self, table: RateTable, source: str, loaded_at: datetime = None):
        """Swap in a complete table."""
        if not len(table):
            raise DataAcquisitionError(f"Refusing to load an empty rate card from {source}")
        with self._lock:
            self._table = table
            self._source = source
            self._last_updated = loaded_at or datetime.now()
            self._attempt_tick = self._clock()

    def refresh(self) -> bool:
        """
        Run the acquisition chain.
        Returns False (keeping the prior table) when every source fails;
        raises DataAcquisitionError if there is no prior table to keep.
        """
        self._attempt_tick = self._clock()
        try:
            result = acquire_rate_table(self.strategies)
        except DataAcquisitionError as e:
            self.last_error = e
            logger.error("Rate card refresh failed: %s", e)
            if self._table is None:
                raise
            return False
        self.replace(result.table, result.source, result.loaded_at)
        self.last_error = None
        return True

    def is_stale(self) -> bool:
        if self._attempt_tick is None:
            return True
        # failed attempts also wait out the interval before retrying
        return self._clock() - self._attempt_tick >= self.refresh_interval

    def refresh_if_stale(self) -> bool:
        """Auto-refresh hook, called on every app rerun."""
        if self._table is None:
            return self.refresh()
        if self.auto_refresh and self.is_stale():
            logger.info("Auto-refreshing rate card...")
            return self.refresh()
        return False
