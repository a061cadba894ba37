"""
Rate table store tests: atomic replacement, failed refresh, auto-refresh timing.

Run with: pytest tests/test_table_store.py -v
"""

import pytest

from rate_desk.utils.data_loader import StaticBackupStrategy
from rate_desk.utils.errors import DataAcquisitionError
from rate_desk.utils.models import RateTable, RoleRecord
from rate_desk.utils.rate_card_data import backup_rate_table
from rate_desk.utils.table_store import RateTableStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class ScriptedStrategy:
    """Returns the queued tables in order; a queued exception is raised instead."""
    name = 'scripted'

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def load(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _table(*roles):
    return RateTable(tuple(RoleRecord(role=r, onshore_cost=10.0) for r in roles))


@pytest.fixture
def clock():
    return FakeClock()


class TestRateTableStore:

    def test_first_access_loads(self):
        store = RateTableStore([StaticBackupStrategy()], refresh_interval=60, auto_refresh=True)
        assert not store.is_loaded
        assert store.table == backup_rate_table()
        assert store.source == 'backup data'
        assert store.last_updated is not None

    def test_failed_refresh_keeps_previous_table(self, clock):
        strategy = ScriptedStrategy(_table('A'), DataAcquisitionError("down"))
        store = RateTableStore([strategy], refresh_interval=60, auto_refresh=True, clock=clock)

        assert store.refresh() is True
        before = store.table

        assert store.refresh() is False
        assert store.table is before
        assert isinstance(store.last_error, DataAcquisitionError)

    def test_failed_first_load_raises(self, clock):
        store = RateTableStore([ScriptedStrategy(DataAcquisitionError("down"))], clock=clock)
        with pytest.raises(DataAcquisitionError):
            store.refresh()
        assert not store.is_loaded

    def test_refresh_swaps_whole_table(self, clock):
        strategy = ScriptedStrategy(_table('A', 'B'), _table('C'))
        store = RateTableStore([strategy], refresh_interval=60, auto_refresh=True, clock=clock)
        store.refresh()
        snapshot = store.table

        store.refresh()

        assert snapshot.roles() == ['A', 'B']
        assert store.table.roles() == ['C']

    def test_auto_refresh_waits_for_interval(self, clock):
        strategy = ScriptedStrategy(_table('A'), _table('B'))
        store = RateTableStore([strategy], refresh_interval=60, auto_refresh=True, clock=clock)

        assert store.refresh_if_stale() is True      # initial load
        clock.now += 59
        assert store.refresh_if_stale() is False
        assert strategy.calls == 1

        clock.now += 1
        assert store.refresh_if_stale() is True
        assert store.table.roles() == ['B']

    def test_failed_auto_refresh_waits_before_retrying(self, clock):
        strategy = ScriptedStrategy(_table('A'), DataAcquisitionError("down"), _table('B'))
        store = RateTableStore([strategy], refresh_interval=60, auto_refresh=True, clock=clock)
        store.refresh_if_stale()

        clock.now += 60
        assert store.refresh_if_stale() is False
        clock.now += 30
        assert store.refresh_if_stale() is False
        assert strategy.calls == 2

        clock.now += 30
        assert store.refresh_if_stale() is True
        assert store.table.roles() == ['B']

    def test_auto_refresh_disabled(self, clock):
        strategy = ScriptedStrategy(_table('A'), _table('B'))
        store = RateTableStore([strategy], refresh_interval=60, auto_refresh=False, clock=clock)
        store.refresh_if_stale()
        clock.now += 3600
        assert store.refresh_if_stale() is False
        assert store.table.roles() == ['A']

    def test_replace_rejects_empty_table(self, clock):
        store = RateTableStore([], clock=clock)
        with pytest.raises(DataAcquisitionError):
            store.replace(RateTable(()), 'upload')
