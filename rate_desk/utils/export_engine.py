"""
Rate Desk - Export Engine
Positions and summary as CSV, an XLSX workbook, and a ZIP of both.
"""

import csv
import io
import zipfile
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from rate_desk.utils.formatting import round_half_up
from rate_desk.utils.models import LOCATIONS, LOCATION_LABELS, Position, PositionSummary

POSITION_HEADERS = ['ID', 'Role', 'Location', 'Hours', 'Desired Margin',
                    'Cost/hr', 'Client Rate/hr', 'Total Cost to Client']

HEADER_FILL = PatternFill(start_color='1F4E78', end_color='1F4E78', fill_type='solid')
HEADER_FONT = Font(bold=True, color='FFFFFF')
CURRENCY_FORMAT = '"$"#,##0.00'
PERCENT_FORMAT = '0.0%'


def _position_row(p: Position) -> list:
    return [
        p.id,
        p.input.role,
        LOCATION_LABELS[p.input.location],
        p.input.hours,
        round_half_up(p.input.margin, 4),
        round_half_up(p.result.selected_cost, 2),
        round_half_up(p.result.selected_client_rate, 2),
        round_half_up(p.result.total_cost, 2),
    ]


def _summary_rows(summary: PositionSummary) -> list:
    rows = [
        ('Total Positions', summary.total_positions),
        ('Total Hours', summary.total_hours),
        ('Average Client Rate', round_half_up(summary.avg_client_rate, 2)),
        ('Average Desired Margin', round_half_up(summary.avg_desired_margin, 4)),
        ('Total (Selected Locations)', round_half_up(summary.total_selected, 2)),
    ]
    for loc in LOCATIONS:
        rows.append((f'All {LOCATION_LABELS[loc]}', round_half_up(summary.location_totals[loc], 2)))
        rows.append((f'{LOCATION_LABELS[loc]} Margin', round_half_up(summary.location_margins[loc], 4)))
    return rows


def generate_positions_csv(positions: Iterable[Position]) -> str:
    """One row per position, raw numbers."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(POSITION_HEADERS)
    for p in positions:
        writer.writerow(_position_row(p))
    return buffer.getvalue()


def generate_summary_csv(summary: PositionSummary) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(['Metric', 'Value'])
    for label, value in _summary_rows(summary):
        writer.writerow([label, value])
    return buffer.getvalue()


def create_positions_workbook(positions: Iterable[Position], summary: PositionSummary) -> bytes:
    """POSITIONS and SUMMARY sheets with currency / percent number formats."""
    wb = Workbook()

    ws = wb.active
    ws.title = 'POSITIONS'
    ws.append(POSITION_HEADERS)
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal='center')
    for p in positions:
        ws.append(_position_row(p))
    for row in ws.iter_rows(min_row=2):
        row[4].number_format = PERCENT_FORMAT
        for cell in row[5:8]:
            cell.number_format = CURRENCY_FORMAT
    for idx, width in enumerate([6, 34, 12, 10, 15, 12, 15, 22], start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width

    ws_sum = wb.create_sheet('SUMMARY')
    ws_sum.append(['Metric', 'Value'])
    for cell in ws_sum[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
    for label, value in _summary_rows(summary):
        ws_sum.append([label, value])
        cell = ws_sum.cell(row=ws_sum.max_row, column=2)
        if 'Margin' in label:
            cell.number_format = PERCENT_FORMAT
        elif label not in ('Total Positions', 'Total Hours'):
            cell.number_format = CURRENCY_FORMAT
    ws_sum.column_dimensions['A'].width = 28
    ws_sum.column_dimensions['B'].width = 18

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def create_export_zip(positions: Iterable[Position], summary: PositionSummary) -> bytes:
    """Create a ZIP file with the CSVs and the workbook."""
    positions = list(positions)
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
        zf.writestr('Positions.csv', generate_positions_csv(positions))
        zf.writestr('Summary.csv', generate_summary_csv(summary))
        zf.writestr('Rate_Desk_Positions.xlsx', create_positions_workbook(positions, summary))

    buffer.seek(0)
    return buffer.getvalue()
