"""
Record parser: turns a raw regulatory dataset export into canonical records.

The first non-blank line is the header.  Every following non-blank line is
tokenized, mapped onto the header, run through the field normalizers and
assembled into a CanonicalPesticideRecord.  A bad row is skipped and logged;
it never aborts the batch.

Rows are independent, so they may be parsed on a thread pool.  Output order
always follows input order.

Public API:
    parse_dataset(raw_text, max_workers) → ParseResult
    parse_row(headers, line, row_number) → CanonicalPesticideRecord
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from config.schema import DATASET_COLUMNS, REQUIRED_COLUMNS, ApprovalStatus
from processing.normalizer import (
    MRLEntry,
    normalize_approval_status,
    parse_approved_crops,
    parse_hazard_codes,
    parse_jurisdictions,
    parse_mrl_values,
    parse_restrictions,
)
from processing.tokenizer import has_balanced_quotes, tokenize_line

logger = logging.getLogger(__name__)


class RowParseError(ValueError):
    """Raised when a single dataset row cannot become a canonical record."""


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CanonicalPesticideRecord:
    """One normalized dataset row, ready for reconciliation."""

    active_substance: str
    product_name: str
    registration_number: str = ""
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    approval_date: str | None = None
    expiry_date: str | None = None
    approved_crops: list[str] = field(default_factory=list)
    mrl_values: list[MRLEntry] = field(default_factory=list)
    jurisdictions: list[str] = field(default_factory=list)
    restrictions: list[str] = field(default_factory=list)
    hazard_codes: list[str] = field(default_factory=list)
    row_number: int = 0


@dataclass
class SkippedRow:
    """A dataset row that was dropped, with the reason."""

    row_number: int
    reason: str
    line: str = ""


@dataclass
class ParseResult:
    """Output of the parse_dataset() function."""

    records: list[CanonicalPesticideRecord] = field(default_factory=list)
    skipped_rows: list[SkippedRow] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)
    missing_columns: list[str] = field(default_factory=list)
    total_rows: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the input yielded nothing to import."""
        return not self.records


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def parse_dataset(raw_text: str, max_workers: int = 1) -> ParseResult:
    """
    Parse a full dataset export into canonical records.

    Steps:
      1. Split into lines; the first non-blank line is the header.
      2. Tokenize every following non-blank line.
      3. Skip rows with fewer fields than the header.
      4. Normalize fields and build the record; any failure skips the row.

    Args:
        raw_text: The complete export, header line included.
        max_workers: Thread pool size for row parsing (1 = inline).

    Returns:
        ParseResult with records in input order and every skipped row.
        Empty or header-only input gives an empty result, not an error.
    """
    result = ParseResult()

    lines = raw_text.replace("\r\n", "\n").replace("\r", "\n").split("\n") if raw_text else []
    numbered = [(number, line) for number, line in enumerate(lines, start=1) if line.strip()]

    if not numbered:
        logger.info("Dataset is empty: nothing to import")
        return result

    header_number, header_line = numbered[0]
    result.headers = [_clean_header(name) for name in tokenize_line(header_line.strip())]
    result.missing_columns = [c for c in DATASET_COLUMNS if c not in result.headers]
    if result.missing_columns:
        logger.warning(
            f"Header on line {header_number} is missing columns "
            f"{result.missing_columns}; they will be treated as blank"
        )

    data_lines = numbered[1:]
    result.total_rows = len(data_lines)
    if not data_lines:
        logger.info("Dataset has a header but no rows: nothing to import")
        return result

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(
                executor.map(
                    lambda item: _parse_row_safely(result.headers, item[1], item[0]),
                    data_lines,
                )
            )
    else:
        outcomes = [
            _parse_row_safely(result.headers, line, number)
            for number, line in data_lines
        ]

    for outcome in outcomes:
        if isinstance(outcome, SkippedRow):
            result.skipped_rows.append(outcome)
        else:
            result.records.append(outcome)

    logger.info(
        f"Parsed {len(result.records)} records from {result.total_rows} rows, "
        f"{len(result.skipped_rows)} skipped"
    )
    return result


def parse_row(
    headers: list[str],
    line: str,
    row_number: int,
) -> CanonicalPesticideRecord:
    """
    Build one canonical record from a dataset line.

    Raises:
        RowParseError: If the row is short or a required field is blank.
    """
    stripped = line.strip()
    values = tokenize_line(stripped)
    if len(values) < len(headers):
        raise RowParseError(
            f"expected {len(headers)} fields, found {len(values)}"
        )

    if not has_balanced_quotes(stripped):
        logger.warning(
            f"Row {row_number}: unbalanced quotes, last field runs to end of line"
        )

    row = {header: value.strip() for header, value in zip(headers, values)}

    blank_required = [c for c in REQUIRED_COLUMNS if not row.get(c)]
    if blank_required:
        raise RowParseError(f"missing required field(s) {blank_required}")

    return CanonicalPesticideRecord(
        active_substance=row["Active substance"],
        product_name=row["Product name"],
        registration_number=row.get("Registration number", ""),
        approval_status=normalize_approval_status(row.get("Approval status")),
        approval_date=row.get("Approval date") or None,
        expiry_date=row.get("Expiry date") or None,
        approved_crops=parse_approved_crops(row.get("Approved crops")),
        mrl_values=parse_mrl_values(row.get("MRL (mg/kg)")),
        jurisdictions=parse_jurisdictions(row.get("Member states")),
        restrictions=parse_restrictions(row.get("Restrictions")),
        hazard_codes=parse_hazard_codes(row.get("Hazard classification")),
        row_number=row_number,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _parse_row_safely(
    headers: list[str],
    line: str,
    row_number: int,
) -> CanonicalPesticideRecord | SkippedRow:
    """Run parse_row inside a failure boundary."""
    try:
        return parse_row(headers, line, row_number)
    except Exception as exc:
        logger.warning(f"Skipping row {row_number}: {exc}")
        return SkippedRow(row_number=row_number, reason=str(exc), line=line)


def _clean_header(name: str) -> str:
    # Exports sometimes start with a UTF-8 byte order mark.
    return name.strip().lstrip("\ufeff").strip()
