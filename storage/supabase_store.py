"""
Supabase-backed PesticideStore.

Products live in the `pesticide_products` table and MRL rows in
`pesticide_dosages` (both names configurable).  Client errors are wrapped
in StoreError so the import engine can count them per record.

Public API:
    SupabasePesticideStore(client, products_table, dosages_table)
    SupabasePesticideStore.from_settings(settings)
"""

import logging
from datetime import datetime, timezone

from supabase import Client, create_client

from config.schema import DOSAGE_COLUMNS, PRODUCT_COLUMNS
from config.settings import Settings
from storage.base import (
    DosageEntry,
    PesticideStore,
    Product,
    StoreError,
    normalize_product_name,
)

logger = logging.getLogger(__name__)

# Product attribute → pesticide_products column
PRODUCT_COLUMN_MAP: dict[str, str] = {
    "id": "id",
    "name": "name",
    "active_ingredient": "active_ingredient",
    "registration_number": "eu_registration_number",
    "approval_status": "eu_approval_status",
    "approved": "eu_approved",
    "approval_date": "eu_approval_date",
    "expiry_date": "eu_expiry_date",
    "jurisdictions": "eu_member_states",
    "restrictions": "eu_restrictions",
    "hazard_codes": "eu_hazard_classification",
    "safety_rating": "safety_rating",
    "product_type": "type",
    "description": "description",
    "manufacturer": "manufacturer",
    "updated_at": "updated_at",
}

_PRODUCT_SELECT = ",".join(PRODUCT_COLUMNS)
_DOSAGE_SELECT = ",".join(DOSAGE_COLUMNS)

# Characters with special meaning in an ILIKE pattern
_LIKE_ESCAPES = str.maketrans({"%": r"\%", "_": r"\_", "\\": r"\\"})


class SupabasePesticideStore(PesticideStore):
    """PesticideStore over the Supabase PostgREST API."""

    def __init__(
        self,
        client: Client,
        products_table: str = "pesticide_products",
        dosages_table: str = "pesticide_dosages",
    ) -> None:
        self._client = client
        self._products_table = products_table
        self._dosages_table = dosages_table

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabasePesticideStore":
        settings.require_supabase()
        client = create_client(settings.supabase_url, settings.supabase_key)
        return cls(client, settings.products_table, settings.dosages_table)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------
    def find_product_by_name(self, name: str) -> Product | None:
        pattern = name.strip().translate(_LIKE_ESCAPES)
        try:
            rows = (
                self._client.table(self._products_table)
                .select(_PRODUCT_SELECT)
                .ilike("name", pattern)
                .execute()
                .data
                or []
            )
        except Exception as exc:
            raise StoreError(f"Lookup of product '{name}' failed: {exc}") from exc

        key = normalize_product_name(name)
        matches = [r for r in rows if normalize_product_name(r.get("name") or "") == key]
        if len(matches) > 1:
            logger.warning(
                f"{len(matches)} stored products match '{name}'; using id {matches[0]['id']}"
            )
        return _row_to_product(matches[0]) if matches else None

    def create_product(self, fields: dict) -> Product:
        payload = _to_columns(fields)
        try:
            rows = self._client.table(self._products_table).insert(payload).execute().data
        except Exception as exc:
            raise StoreError(f"Insert of product '{fields.get('name')}' failed: {exc}") from exc
        if not rows:
            raise StoreError(f"Insert of product '{fields.get('name')}' returned no row")
        return _row_to_product(rows[0])

    def update_product(self, product_id: int, fields: dict) -> None:
        payload = _to_columns(fields)
        payload.setdefault("updated_at", datetime.now(timezone.utc).isoformat())
        try:
            rows = (
                self._client.table(self._products_table)
                .update(payload)
                .eq("id", product_id)
                .execute()
                .data
            )
        except Exception as exc:
            raise StoreError(f"Update of product {product_id} failed: {exc}") from exc
        if not rows:
            raise StoreError(f"Product {product_id} does not exist")

    def list_products(self) -> list[Product]:
        try:
            rows = (
                self._client.table(self._products_table)
                .select(_PRODUCT_SELECT)
                .execute()
                .data
                or []
            )
        except Exception as exc:
            raise StoreError(f"Listing products failed: {exc}") from exc
        return [_row_to_product(r) for r in rows]

    # ------------------------------------------------------------------
    # Dosage entries
    # ------------------------------------------------------------------
    def create_dosage_entry(
        self,
        product_id: int,
        crop: str,
        mrl_value: float,
        unit: str,
    ) -> DosageEntry:
        payload = {
            "pesticide_id": product_id,
            "crop": crop,
            "mrl_value": mrl_value,
            "mrl_unit": unit,
            "eu_compliant": True,
            "notes": f"EU MRL: {mrl_value} {unit}",
        }
        try:
            rows = self._client.table(self._dosages_table).insert(payload).execute().data
        except Exception as exc:
            raise StoreError(
                f"Insert of MRL row for product {product_id} ({crop}) failed: {exc}"
            ) from exc
        if not rows:
            raise StoreError(f"Insert of MRL row for product {product_id} returned no row")
        return _row_to_dosage(rows[0])

    def list_dosage_entries(self, product_id: int) -> list[DosageEntry]:
        try:
            rows = (
                self._client.table(self._dosages_table)
                .select(_DOSAGE_SELECT)
                .eq("pesticide_id", product_id)
                .execute()
                .data
                or []
            )
        except Exception as exc:
            raise StoreError(f"Listing MRL rows of product {product_id} failed: {exc}") from exc
        return [_row_to_dosage(r) for r in rows]


# ═══════════════════════════════════════════════════════════════════════════
# Row mapping
# ═══════════════════════════════════════════════════════════════════════════

def _to_columns(fields: dict) -> dict:
    unknown = set(fields) - set(PRODUCT_COLUMN_MAP)
    if unknown:
        raise StoreError(f"Unknown product fields: {sorted(unknown)}")
    return {PRODUCT_COLUMN_MAP[name]: value for name, value in fields.items()}


def _row_to_product(row: dict) -> Product:
    values = {
        attribute: row[column]
        for attribute, column in PRODUCT_COLUMN_MAP.items()
        if column in row and row[column] is not None
    }
    return Product(**values)


def _row_to_dosage(row: dict) -> DosageEntry:
    return DosageEntry(
        id=row["id"],
        product_id=row["pesticide_id"],
        crop=row["crop"],
        mrl_value=float(row["mrl_value"]),
        mrl_unit=row.get("mrl_unit") or "",
        compliant=bool(row.get("eu_compliant", True)),
        notes=row.get("notes") or "",
    )
