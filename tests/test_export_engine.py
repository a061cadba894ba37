"""
Export engine tests: CSV text, workbook cells and the ZIP bundle.

Run with: pytest tests/test_export_engine.py -v
"""

import csv
import io
import zipfile

import pytest
from openpyxl import load_workbook

from rate_desk.utils.export_engine import (
    POSITION_HEADERS, create_export_zip, create_positions_workbook,
    generate_positions_csv, generate_summary_csv,
)
from rate_desk.utils.positions import PositionBook


@pytest.fixture
def book(rate_table):
    book = PositionBook()
    book.add_from_form(rate_table, 'Salesforce Solution Architect', 'onshore', 10, 0.3)
    book.add_from_form(rate_table, 'QA -Quality Assurance', 'offshore', 20, 0.5)
    return book


class TestExports:

    def test_positions_csv_has_one_row_per_position(self, book):
        rows = list(csv.reader(io.StringIO(generate_positions_csv(book.positions))))

        assert rows[0] == POSITION_HEADERS
        assert len(rows) == 3
        assert rows[1][:3] == ['1', 'Salesforce Solution Architect', 'Onshore']
        assert float(rows[1][7]) == pytest.approx(1428.57)
        assert rows[2][2] == 'Offshore'
        assert float(rows[2][6]) == pytest.approx(13.5)

    def test_summary_csv(self, book):
        rows = dict(csv.reader(io.StringIO(generate_summary_csv(book.summary()))))
        assert rows['Total Positions'] == '2'
        assert float(rows['Total Hours']) == 30
        assert float(rows['Total (Selected Locations)']) == pytest.approx(1698.57)
        assert float(rows['All Nearshore']) == pytest.approx(671.43)

    def test_workbook_cells(self, book):
        wb = load_workbook(io.BytesIO(create_positions_workbook(book.positions, book.summary())))

        ws = wb['POSITIONS']
        assert [c.value for c in ws[1]] == POSITION_HEADERS
        assert ws['B2'].value == 'Salesforce Solution Architect'
        assert ws['H2'].value == pytest.approx(1428.57)
        assert ws.max_row == 3

        summary = {row[0].value: row[1].value for row in wb['SUMMARY'].iter_rows(min_row=2)}
        assert summary['Total Positions'] == 2
        assert summary['Offshore Margin'] == pytest.approx(0.4)

    def test_empty_book_exports_headers_only(self):
        empty = PositionBook()
        assert generate_positions_csv(empty.positions).strip() == ','.join(POSITION_HEADERS)

    def test_zip_bundle(self, book):
        data = create_export_zip(book.positions, book.summary())
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert sorted(zf.namelist()) == ['Positions.csv', 'Rate_Desk_Positions.xlsx', 'Summary.csv']
            assert 'QA -Quality Assurance' in zf.read('Positions.csv').decode()
