from io import BytesIO
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from extratorzap.export.csv_exporter import CSV_HEADERS, export_rows
from extratorzap.lookup.business_lookup import (
    BusinessRecord,
    SearchCriteria,
    STATUS_BAD_WEBSITE,
    STATUS_NO_WEBSITE,
)

SHEET_TITLE = "Empresas"
STATUS_COLUMN = CSV_HEADERS.index("Status do Site") + 1

HEADER_FILL = PatternFill(fill_type="solid", start_color="2563EB", end_color="2563EB")
HEADER_FONT = Font(color="FFFFFF", bold=True)

# Same colours as the status badges in the results table
STATUS_STYLES = {
    STATUS_NO_WEBSITE: (PatternFill(fill_type="solid", start_color="FEE2E2", end_color="FEE2E2"), Font(color="991B1B", bold=True)),
    STATUS_BAD_WEBSITE: (PatternFill(fill_type="solid", start_color="FEF9C3", end_color="FEF9C3"), Font(color="854D0E", bold=True)),
}


def style_header_row(ws):
    """Blue header, frozen below the header, with a filter on every column"""
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal='center', vertical='center')
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = ws.dimensions


def highlight_website_status(ws):
    for (cell,) in ws.iter_rows(min_row=2, min_col=STATUS_COLUMN, max_col=STATUS_COLUMN):
        style = STATUS_STYLES.get(cell.value)
        if style:
            cell.fill, cell.font = style


def auto_adjust_column_width(ws):
    """Size columns to their longest value, capped at 50 characters"""
    for column in ws.columns:
        column_letter = get_column_letter(column[0].column)
        max_length = max(len(str(cell.value or "")) for cell in column)
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)


def build_workbook(records: Iterable[BusinessRecord], criteria: SearchCriteria) -> bytes:
    """Same rows as the CSV export, as an .xlsx file"""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(CSV_HEADERS)
    for values in export_rows(records, criteria):
        ws.append(values)

    style_header_row(ws)
    highlight_website_status(ws)
    auto_adjust_column_width(ws)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
