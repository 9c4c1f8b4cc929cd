"""
In-memory PesticideStore, used for dry runs and tests.

All operations hold a single lock, so the store is safe to share between
import workers.  Like a database with a unique index on lower(name), it
refuses to create a second product with the same normalized name.
"""

import copy
import logging
import threading
from dataclasses import fields as dataclass_fields

from storage.base import (
    DosageEntry,
    PesticideStore,
    Product,
    StoreError,
    normalize_product_name,
)

logger = logging.getLogger(__name__)

_PRODUCT_FIELDS: set[str] = {f.name for f in dataclass_fields(Product)} - {"id"}


class InMemoryPesticideStore(PesticideStore):
    """Dict-backed store with auto-increment ids."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._products: dict[int, Product] = {}
        self._dosages: dict[int, DosageEntry] = {}
        self._next_product_id = 1
        self._next_dosage_id = 1

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------
    def find_product_by_name(self, name: str) -> Product | None:
        key = normalize_product_name(name)
        with self._lock:
            for product in self._products.values():
                if normalize_product_name(product.name) == key:
                    return copy.deepcopy(product)
        return None

    def create_product(self, fields: dict) -> Product:
        _check_fields(fields)
        name = fields.get("name") or ""
        if not name.strip():
            raise StoreError("Product name is required")

        key = normalize_product_name(name)
        with self._lock:
            if any(normalize_product_name(p.name) == key for p in self._products.values()):
                raise StoreError(f"Product '{name}' already exists")

            product = Product(id=self._next_product_id, **copy.deepcopy(fields))
            self._products[product.id] = product
            self._next_product_id += 1
            return copy.deepcopy(product)

    def update_product(self, product_id: int, fields: dict) -> None:
        _check_fields(fields)
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise StoreError(f"Product {product_id} does not exist")
            for name, value in copy.deepcopy(fields).items():
                setattr(product, name, value)

    def list_products(self) -> list[Product]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._products.values()]

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
        with self._lock:
            if product_id not in self._products:
                raise StoreError(f"Product {product_id} does not exist")
            entry = DosageEntry(
                id=self._next_dosage_id,
                product_id=product_id,
                crop=crop,
                mrl_value=mrl_value,
                mrl_unit=unit,
                compliant=True,
                notes=f"EU MRL: {mrl_value} {unit}",
            )
            self._dosages[entry.id] = entry
            self._next_dosage_id += 1
            return copy.deepcopy(entry)

    def list_dosage_entries(self, product_id: int) -> list[DosageEntry]:
        with self._lock:
            return [
                copy.deepcopy(entry)
                for entry in self._dosages.values()
                if entry.product_id == product_id
            ]

    @property
    def dosage_count(self) -> int:
        with self._lock:
            return len(self._dosages)


def _check_fields(fields: dict) -> None:
    unknown = set(fields) - _PRODUCT_FIELDS
    if unknown:
        raise StoreError(f"Unknown product fields: {sorted(unknown)}")
