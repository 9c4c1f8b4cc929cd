"""
Excel formatter: writes a preview workbook of parsed registry records.

Sheet 1: "Products"     - one row per canonical record, list fields joined,
                          computed safety rating, auto-filter.
Sheet 2: "Skipped Rows" - every row the parser dropped and why.

Lets an operator review what an import would write before running it
against the live store.

Public API:
    records_to_dataframe(records) → pd.DataFrame
    save_preview(records, skipped_rows, output_path) → Path
"""

import logging
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
import pandas as pd

from processing.record_parser import CanonicalPesticideRecord, SkippedRow
from processing.safety_score import calculate_safety_rating

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

PREVIEW_COLUMNS: list[str] = [
    "Row",
    "Product Name",
    "Active Substance",
    "Registration Number",
    "Approval Status",
    "Approval Date",
    "Expiry Date",
    "Approved Crops",
    "MRL Values",
    "Member States",
    "Restrictions",
    "Hazard Codes",
    "Safety Rating",
]

_YELLOW_FILL = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
_NORMAL_FONT = Font(size=10)

_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8

# Ratings at or below this are highlighted
_LOW_RATING_HIGHLIGHT = 2


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def records_to_dataframe(records: list[CanonicalPesticideRecord]) -> pd.DataFrame:
    """
    Flatten canonical records into a DataFrame with PREVIEW_COLUMNS.

    List fields are joined with "; " (", " for member states and hazard
    codes), MRL entries are rendered as "crop: value unit".
    """
    rows = [
        {
            "Row": record.row_number,
            "Product Name": record.product_name,
            "Active Substance": record.active_substance,
            "Registration Number": record.registration_number or None,
            "Approval Status": record.approval_status.value,
            "Approval Date": record.approval_date,
            "Expiry Date": record.expiry_date,
            "Approved Crops": "; ".join(record.approved_crops) or None,
            "MRL Values": "; ".join(
                f"{entry.crop}: {entry.mrl} {entry.unit}" for entry in record.mrl_values
            ) or None,
            "Member States": ", ".join(record.jurisdictions) or None,
            "Restrictions": "; ".join(record.restrictions) or None,
            "Hazard Codes": ", ".join(record.hazard_codes) or None,
            "Safety Rating": calculate_safety_rating(record.hazard_codes),
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=PREVIEW_COLUMNS)


def save_preview(
    records: list[CanonicalPesticideRecord],
    skipped_rows: list[SkippedRow],
    output_path: Path,
) -> Path:
    """
    Write the preview workbook.

    Args:
        records: Parsed records.
        skipped_rows: Rows dropped by the parser.
        output_path: Where to save the .xlsx file.

    Returns:
        The output_path (as a Path).
    """
    workbook = openpyxl.Workbook()

    products_sheet = workbook.active
    products_sheet.title = "Products"
    _write_products_sheet(products_sheet, records_to_dataframe(records))

    skipped_sheet = workbook.create_sheet("Skipped Rows")
    _write_skipped_rows_sheet(skipped_sheet, skipped_rows)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(str(output_path))
    workbook.close()

    logger.info(
        f"Preview saved to '{output_path}' "
        f"({len(records)} products, {len(skipped_rows)} skipped rows)"
    )
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# Sheets
# ═══════════════════════════════════════════════════════════════════════════

def _write_products_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    dataframe: pd.DataFrame,
) -> None:
    """Header, data rows, low-rating highlighting, filter and frozen header."""
    _write_header_row(worksheet, PREVIEW_COLUMNS)

    rating_col = PREVIEW_COLUMNS.index("Safety Rating") + 1
    for row_offset, df_idx in enumerate(dataframe.index):
        excel_row = row_offset + 2
        for col_idx, col_name in enumerate(PREVIEW_COLUMNS, start=1):
            value = dataframe.at[df_idx, col_name]
            if pd.isna(value):
                value = None
            elif hasattr(value, "item"):
                # numpy scalar → plain Python value for openpyxl
                value = value.item()
            cell = worksheet.cell(row=excel_row, column=col_idx, value=value)
            cell.font = _NORMAL_FONT

        rating = dataframe.at[df_idx, "Safety Rating"]
        if rating <= _LOW_RATING_HIGHLIGHT:
            worksheet.cell(row=excel_row, column=rating_col).fill = _YELLOW_FILL

    last_col_letter = get_column_letter(len(PREVIEW_COLUMNS))
    worksheet.auto_filter.ref = f"A1:{last_col_letter}{len(dataframe) + 1}"
    worksheet.freeze_panes = "A2"
    _auto_fit_column_widths(worksheet)


def _write_skipped_rows_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    skipped_rows: list[SkippedRow],
) -> None:
    headers = ["Row", "Reason", "Line"]
    _write_header_row(worksheet, headers)

    for row_offset, skipped in enumerate(skipped_rows):
        excel_row = row_offset + 2
        worksheet.cell(row=excel_row, column=1, value=skipped.row_number).font = _NORMAL_FONT
        worksheet.cell(row=excel_row, column=2, value=skipped.reason).font = _NORMAL_FONT
        worksheet.cell(row=excel_row, column=3, value=skipped.line).font = _NORMAL_FONT

    if skipped_rows:
        worksheet.auto_filter.ref = f"A1:C{len(skipped_rows) + 1}"

    _auto_fit_column_widths(worksheet)


# ═══════════════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════════════

def _write_header_row(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    headers: list[str],
) -> None:
    for col_idx, header in enumerate(headers, start=1):
        cell = worksheet.cell(row=1, column=col_idx, value=header)
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT
        cell.alignment = Alignment(horizontal="center")


def _auto_fit_column_widths(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
) -> None:
    """
    Set column widths based on content length, clamped between
    _MIN_COL_WIDTH and _MAX_COL_WIDTH.
    """
    for column_cells in worksheet.columns:
        max_length = _MIN_COL_WIDTH
        col_letter = get_column_letter(column_cells[0].column)

        for cell in column_cells:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        worksheet.column_dimensions[col_letter].width = min(max_length + 2, _MAX_COL_WIDTH)
