"""
Store interface consumed by the import engine.

The relational store is an external service.  The pipeline only needs the
handful of operations declared on PesticideStore; adapters translate them
to a concrete backend (in-memory, Supabase).

Product names are unique case-insensitively: find_product_by_name() must
match on normalize_product_name().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class StoreError(Exception):
    """Raised by store adapters when a store operation fails."""


def normalize_product_name(name: str) -> str:
    """Dedup key for product names: trimmed and case-folded."""
    return name.strip().casefold()


@dataclass
class Product:
    """A stored pesticide product."""

    id: int
    name: str
    active_ingredient: str = ""
    registration_number: str = ""
    approval_status: str = "approved"
    approved: bool = True
    approval_date: str | None = None
    expiry_date: str | None = None
    jurisdictions: list[str] = field(default_factory=list)
    restrictions: list[str] = field(default_factory=list)
    hazard_codes: list[str] = field(default_factory=list)
    safety_rating: int = 3
    product_type: str = "chemical"
    description: str = ""
    manufacturer: str = ""
    updated_at: str | None = None


@dataclass
class DosageEntry:
    """A maximum residue level row owned by a product."""

    id: int
    product_id: int
    crop: str
    mrl_value: float
    mrl_unit: str
    compliant: bool = True
    notes: str = ""


class PesticideStore(ABC):
    """Operations the import engine needs from the relational store."""

    @abstractmethod
    def find_product_by_name(self, name: str) -> Product | None:
        """Return the product whose name matches case-insensitively."""

    @abstractmethod
    def create_product(self, fields: dict) -> Product:
        """Insert a product; *fields* are Product attribute names."""

    @abstractmethod
    def update_product(self, product_id: int, fields: dict) -> None:
        """Overwrite the given attributes of an existing product."""

    @abstractmethod
    def create_dosage_entry(
        self,
        product_id: int,
        crop: str,
        mrl_value: float,
        unit: str,
    ) -> DosageEntry:
        """Insert one MRL row for a product."""

    @abstractmethod
    def list_dosage_entries(self, product_id: int) -> list[DosageEntry]:
        """All MRL rows of a product."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Every stored product."""
