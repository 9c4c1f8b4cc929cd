"""
Import engine: reconciles canonical records into the pesticide store.

Per record:
  1. Look up the product by case-insensitive name (lookup cache first).
  2. Found → update approval metadata, jurisdictions, restrictions, hazard
     codes and safety rating.  Existing MRL rows are never touched.
  3. Not found → create the product with its computed safety rating, then
     one dosage row per MRL entry.
  4. Any store failure is counted and logged; the batch always finishes.

Records sharing a normalized product name go to one per-name queue that is
processed sequentially, so the look-up-then-create step can never race with
itself.  Different names run concurrently when max_workers > 1.  Setting
stop_event stops further records from being started; the one in flight
finishes so no product is left without its MRL rows.

Public API:
    import_records(records, store, lookup_cache, max_workers, stop_event)
        → ImportSummary
"""

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone

from config.schema import DEFAULT_MANUFACTURER, DEFAULT_PRODUCT_TYPE, ApprovalStatus
from processing.record_parser import CanonicalPesticideRecord
from processing.safety_score import calculate_safety_rating
from storage.base import PesticideStore, normalize_product_name
from utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

_CREATED = "created"
_UPDATED = "updated"
_FAILED = "failed"
_NOT_SUBMITTED = "not_submitted"


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ImportSummary:
    """Output of the import_records() function."""

    success_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
    created_count: int = 0
    updated_count: int = 0
    dosage_entries_created: int = 0
    not_submitted_count: int = 0
    nothing_to_import: bool = False


@dataclass
class _RecordOutcome:
    index: int
    action: str
    dosage_entries_created: int = 0
    error: str = ""


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def import_records(
    records: Sequence[CanonicalPesticideRecord],
    store: PesticideStore,
    lookup_cache: TTLCache | None = None,
    max_workers: int = 1,
    stop_event: threading.Event | None = None,
) -> ImportSummary:
    """
    Reconcile canonical records into the store.

    Args:
        records: Parsed records, in input order.
        store: Store adapter to read from and write to.
        lookup_cache: Optional cache of normalized name → product id.
        max_workers: Number of per-name queues processed concurrently.
        stop_event: When set, no further records are started.

    Returns:
        ImportSummary.  Empty input gives nothing_to_import=True.
    """
    if not records:
        logger.info("No records to import")
        return ImportSummary(nothing_to_import=True)

    logger.info(f"Importing {len(records)} pesticide records...")

    queues = _group_by_product_name(records)

    def run_queue(indices: list[int]) -> list[_RecordOutcome]:
        outcomes = []
        for index in indices:
            if stop_event is not None and stop_event.is_set():
                outcomes.append(_RecordOutcome(index=index, action=_NOT_SUBMITTED))
                continue
            outcomes.append(_import_one(index, records[index], store, lookup_cache))
        return outcomes

    if max_workers > 1 and len(queues) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            batches = list(executor.map(run_queue, queues))
    else:
        batches = [run_queue(indices) for indices in queues]

    all_outcomes = sorted(
        (outcome for batch in batches for outcome in batch),
        key=lambda outcome: outcome.index,
    )
    summary = _summarize(all_outcomes)

    logger.info(
        f"Import complete: {summary.success_count} successful, "
        f"{summary.error_count} errors "
        f"({summary.created_count} created, {summary.updated_count} updated, "
        f"{summary.dosage_entries_created} MRL rows added"
        + (f", {summary.not_submitted_count} not started" if summary.not_submitted_count else "")
        + ")"
    )
    return summary


def product_fields_for_create(record: CanonicalPesticideRecord) -> dict:
    """Product attributes written when a record creates a new product."""
    fields = product_fields_for_update(record)
    fields.update({
        "name": record.product_name,
        "active_ingredient": record.active_substance,
        "product_type": DEFAULT_PRODUCT_TYPE,
        "description": f"EU registered pesticide containing {record.active_substance}",
        "manufacturer": DEFAULT_MANUFACTURER,
    })
    return fields


def product_fields_for_update(record: CanonicalPesticideRecord) -> dict:
    """Product attributes overwritten when a record matches a stored product."""
    return {
        "registration_number": record.registration_number,
        "approval_status": record.approval_status.value,
        "approved": record.approval_status == ApprovalStatus.APPROVED,
        "approval_date": record.approval_date,
        "expiry_date": record.expiry_date,
        "jurisdictions": list(record.jurisdictions),
        "restrictions": list(record.restrictions),
        "hazard_codes": list(record.hazard_codes),
        "safety_rating": calculate_safety_rating(record.hazard_codes),
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _group_by_product_name(records: Sequence[CanonicalPesticideRecord]) -> list[list[int]]:
    """Record indices grouped by normalized product name, input order kept."""
    queues: dict[str, list[int]] = {}
    for index, record in enumerate(records):
        queues.setdefault(normalize_product_name(record.product_name), []).append(index)
    return list(queues.values())


def _import_one(
    index: int,
    record: CanonicalPesticideRecord,
    store: PesticideStore,
    lookup_cache: TTLCache | None,
) -> _RecordOutcome:
    """Reconcile one record; every exception becomes a failed outcome."""
    key = normalize_product_name(record.product_name)
    try:
        product_id = lookup_cache.get(key) if lookup_cache is not None else None
        if product_id is None:
            existing = store.find_product_by_name(record.product_name)
            product_id = existing.id if existing is not None else None

        if product_id is not None:
            try:
                store.update_product(product_id, product_fields_for_update(record))
            except Exception:
                if lookup_cache is not None:
                    lookup_cache.invalidate(key)
                raise
            if lookup_cache is not None:
                lookup_cache.set(key, product_id)
            logger.debug(f"Updated '{record.product_name}' (id {product_id})")
            return _RecordOutcome(index=index, action=_UPDATED)

        product = store.create_product(product_fields_for_create(record))
        if lookup_cache is not None:
            lookup_cache.set(key, product.id)

        for entry in record.mrl_values:
            store.create_dosage_entry(product.id, entry.crop, entry.mrl, entry.unit)

        logger.debug(
            f"Created '{record.product_name}' (id {product.id}) "
            f"with {len(record.mrl_values)} MRL rows"
        )
        return _RecordOutcome(
            index=index,
            action=_CREATED,
            dosage_entries_created=len(record.mrl_values),
        )

    except Exception as exc:
        logger.error(f"Failed to import record '{record.product_name}': {exc}")
        return _RecordOutcome(
            index=index,
            action=_FAILED,
            error=f"{record.product_name}: {exc}",
        )


def _summarize(outcomes: list[_RecordOutcome]) -> ImportSummary:
    summary = ImportSummary()
    for outcome in outcomes:
        if outcome.action == _NOT_SUBMITTED:
            summary.not_submitted_count += 1
        elif outcome.action == _FAILED:
            summary.error_count += 1
            summary.errors.append(outcome.error)
        else:
            summary.success_count += 1
            summary.dosage_entries_created += outcome.dosage_entries_created
            if outcome.action == _CREATED:
                summary.created_count += 1
            else:
                summary.updated_count += 1
    return summary
