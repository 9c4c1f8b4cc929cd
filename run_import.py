"""
Command-line entry point: import a regulatory pesticide dataset export.

    python run_import.py data/eu_pesticides_sample.csv --dry-run --preview out/preview.xlsx

Exit codes:
    0  all records imported
    1  some records failed to import
    2  input file or settings unusable
"""

import argparse
import logging
import sys
from pathlib import Path

from config.settings import ConfigurationError, load_settings
from processing.pipeline import PipelineResult, run_pipeline
from storage.base import PesticideStore
from storage.memory_store import InMemoryPesticideStore
from storage.supabase_store import SupabasePesticideStore
from utils.excel_formatter import save_preview
from utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IMPORT_ERRORS = 1
EXIT_UNUSABLE_INPUT = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Parse a pesticide registry export and import it into the store."
    )
    parser.add_argument("input", type=Path, help="Dataset export (CSV text).")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Import into an in-memory store instead of Supabase.",
    )
    parser.add_argument(
        "--preview",
        type=Path,
        default=None,
        help="Write parsed records and skipped rows to this .xlsx file.",
    )
    parser.add_argument(
        "--parse-workers",
        type=_positive_int,
        default=None,
        help="Threads for row parsing (default: PARSE_MAX_WORKERS env var or 1).",
    )
    parser.add_argument(
        "--import-workers",
        type=_positive_int,
        default=None,
        help="Concurrent per-product queues (default: IMPORT_MAX_WORKERS env var or 4).",
    )
    parser.add_argument(
        "--cache-ttl",
        type=_positive_float,
        default=None,
        help="Seconds a product lookup stays cached (default: LOOKUP_CACHE_TTL_SECONDS or 300).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None, store: PesticideStore | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error(str(exc))
        return EXIT_UNUSABLE_INPUT

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        raw_text = args.input.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"Cannot read '{args.input}': {exc}")
        return EXIT_UNUSABLE_INPUT

    if store is None:
        if args.dry_run:
            store = InMemoryPesticideStore()
        else:
            try:
                store = SupabasePesticideStore.from_settings(settings)
            except ConfigurationError as exc:
                logger.error(f"{exc} (use --dry-run to import without a store)")
                return EXIT_UNUSABLE_INPUT

    cache = TTLCache(ttl_seconds=_setting(args.cache_ttl, settings.lookup_cache_ttl_seconds))
    result = run_pipeline(
        raw_text,
        store,
        lookup_cache=cache,
        parse_workers=_setting(args.parse_workers, settings.parse_max_workers),
        import_workers=_setting(args.import_workers, settings.import_max_workers),
    )

    if args.preview is not None:
        save_preview(result.parse_result.records, result.parse_result.skipped_rows, args.preview)

    print(format_summary(result))
    return EXIT_OK if result.import_summary.error_count == 0 else EXIT_IMPORT_ERRORS


def format_summary(result: PipelineResult) -> str:
    """Human-readable summary of a pipeline run."""
    parsed = result.parse_result
    summary = result.import_summary

    if summary.nothing_to_import:
        return (
            f"Nothing to import: {parsed.total_rows} data rows, "
            f"{len(parsed.skipped_rows)} skipped."
        )

    lines = [
        f"Parsed {len(parsed.records)} of {parsed.total_rows} rows "
        f"({len(parsed.skipped_rows)} skipped).",
        f"Imported {summary.success_count} records "
        f"({summary.created_count} created, {summary.updated_count} updated, "
        f"{summary.dosage_entries_created} MRL rows), {summary.error_count} errors.",
    ]
    lines.extend(f"  error: {message}" for message in summary.errors)
    lines.extend(
        f"  skipped row {row.row_number}: {row.reason}" for row in parsed.skipped_rows
    )
    return "\n".join(lines)


def _setting(cli_value, default):
    """Command-line value when given, otherwise the configured default."""
    return default if cli_value is None else cli_value


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{text}'")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{text}'")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return value


if __name__ == "__main__":
    sys.exit(main())
