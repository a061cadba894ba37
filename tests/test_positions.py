"""
Position book tests: ids, delete, clear and failed adds.

Run with: pytest tests/test_positions.py -v
"""

import pytest

from rate_desk.utils.errors import RoleNotFoundError, ValidationError
from rate_desk.utils.positions import PositionBook
from rate_desk.utils.rate_engine import build_input


@pytest.fixture
def filled_book(rate_table):
    book = PositionBook()
    book.add_from_form(rate_table, 'Salesforce Solution Architect', 'onshore', 10, 0.3)
    book.add_from_form(rate_table, 'Junior Developer', 'offshore', 40, 0.5)
    book.add_from_form(rate_table, 'Commerce Cloud Administrator', 'nearshore', 20, 0.4)
    return book


class TestPositionBook:

    def test_ids_are_sequential_from_one(self, filled_book):
        assert [p.id for p in filled_book.positions] == [1, 2, 3]

    def test_delete_removes_only_that_position(self, filled_book):
        assert filled_book.delete(2) is True
        assert [p.id for p in filled_book.positions] == [1, 3]
        assert [p.input.role for p in filled_book.positions] == [
            'Salesforce Solution Architect', 'Commerce Cloud Administrator']

    def test_delete_unknown_id_changes_nothing(self, filled_book):
        assert filled_book.delete(99) is False
        assert len(filled_book) == 3

    def test_clear_resets_summary(self, filled_book):
        filled_book.clear()
        assert len(filled_book) == 0
        summary = filled_book.summary()
        assert summary.total_positions == 0
        assert summary.total_selected == 0

    def test_ids_keep_counting_after_clear(self, filled_book, rate_table):
        filled_book.clear()
        p = filled_book.add_from_form(rate_table, 'Junior Developer', 'onshore', 1, 0.1)
        assert p.id == 4

    def test_get(self, filled_book):
        assert filled_book.get(3).input.location == 'nearshore'
        assert filled_book.get(42) is None

    def test_invalid_form_adds_nothing(self, filled_book, rate_table):
        before = filled_book.positions
        with pytest.raises(ValidationError):
            filled_book.add_from_form(rate_table, 'Junior Developer', 'onshore', 0, 0.3)
        with pytest.raises(ValidationError):
            filled_book.add_from_form(rate_table, '', 'onshore', 10, 0.3)
        assert filled_book.positions == before

        # a failed add does not burn an id
        p = filled_book.add_from_form(rate_table, 'Junior Developer', 'onshore', 1, 0.1)
        assert p.id == 4

    def test_unknown_role_adds_nothing(self, filled_book, rate_table):
        with pytest.raises(RoleNotFoundError):
            filled_book.add(rate_table, build_input('Ghost', 'onshore', 10, 0.3))
        assert len(filled_book) == 3

    def test_position_keeps_its_record(self, filled_book, architect):
        assert filled_book.get(1).record == architect
