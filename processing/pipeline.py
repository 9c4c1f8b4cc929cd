"""
End-to-end import run: parse a dataset export, then reconcile it into the
store.

Public API:
    run_pipeline(raw_text, store, ...) → PipelineResult
"""

import logging
import threading
from dataclasses import dataclass, field

from processing.importer import ImportSummary, import_records
from processing.record_parser import ParseResult, parse_dataset
from storage.base import PesticideStore
from utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of the run_pipeline() function."""

    parse_result: ParseResult = field(default_factory=ParseResult)
    import_summary: ImportSummary = field(default_factory=ImportSummary)

    @property
    def is_clean(self) -> bool:
        """No skipped rows and no failed records."""
        return not self.parse_result.skipped_rows and self.import_summary.error_count == 0


def run_pipeline(
    raw_text: str,
    store: PesticideStore,
    lookup_cache: TTLCache | None = None,
    parse_workers: int = 1,
    import_workers: int = 1,
    stop_event: threading.Event | None = None,
) -> PipelineResult:
    """
    Parse *raw_text* and import the resulting records into *store*.

    Empty or header-only input returns a nothing_to_import summary without
    touching the store.
    """
    parse_result = parse_dataset(raw_text, max_workers=parse_workers)

    if parse_result.is_empty:
        logger.info(
            f"Nothing to import ({parse_result.total_rows} rows, "
            f"{len(parse_result.skipped_rows)} skipped)"
        )
        return PipelineResult(
            parse_result=parse_result,
            import_summary=ImportSummary(nothing_to_import=True),
        )

    if lookup_cache is not None:
        lookup_cache.evict_expired()

    summary = import_records(
        parse_result.records,
        store,
        lookup_cache=lookup_cache,
        max_workers=import_workers,
        stop_event=stop_event,
    )
    return PipelineResult(parse_result=parse_result, import_summary=summary)
