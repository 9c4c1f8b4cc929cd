"""
Approval checks against imported registry data.

Answers the two questions the rest of the application asks after an
import: "may this product be used on this crop?" and "which products are
approved for this crop?".

Public API:
    check_approval(store, product_name, crop, today) → ApprovalCheck
    approved_products_for_crop(store, crop, today) → list[Product]
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from processing.normalizer import normalize_crop_name
from storage.base import PesticideStore, Product

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND: str = "Product not found in registry"


@dataclass
class ApprovalCheck:
    """Result of check_approval()."""

    found: bool = False
    approved: bool = False
    mrl_compliant: bool = False
    restrictions: list[str] = field(default_factory=list)
    expiry_date: str | None = None


def check_approval(
    store: PesticideStore,
    product_name: str,
    crop: str,
    today: date | None = None,
) -> ApprovalCheck:
    """
    Check whether a product is currently approved and has an MRL for a crop.

    A product counts as approved when it is flagged approved and its
    expiry date is either absent or later than *today*.  It is MRL
    compliant for the crop when a compliant dosage row exists for the
    canonical crop name.
    """
    today = today or date.today()
    product = store.find_product_by_name(product_name)
    if product is None:
        return ApprovalCheck(restrictions=[PRODUCT_NOT_FOUND])

    canonical_crop = normalize_crop_name(crop).casefold()
    mrl_compliant = any(
        entry.compliant and entry.crop.casefold() == canonical_crop
        for entry in store.list_dosage_entries(product.id)
    )

    return ApprovalCheck(
        found=True,
        approved=_is_currently_approved(product, today),
        mrl_compliant=mrl_compliant,
        restrictions=list(product.restrictions),
        expiry_date=product.expiry_date,
    )


def approved_products_for_crop(
    store: PesticideStore,
    crop: str,
    today: date | None = None,
) -> list[Product]:
    """Approved, unexpired products carrying an MRL row for *crop*."""
    today = today or date.today()
    canonical_crop = normalize_crop_name(crop).casefold()

    matches: list[Product] = []
    for product in store.list_products():
        if not _is_currently_approved(product, today):
            continue
        entries = store.list_dosage_entries(product.id)
        if any(entry.crop.casefold() == canonical_crop for entry in entries):
            matches.append(product)
    return matches


def _is_currently_approved(product: Product, today: date) -> bool:
    if not product.approved:
        return False
    if not product.expiry_date:
        return True

    try:
        expiry = date.fromisoformat(product.expiry_date[:10])
    except ValueError:
        logger.warning(
            f"Product '{product.name}' has unparseable expiry date "
            f"'{product.expiry_date}'; treating as not approved"
        )
        return False
    return expiry > today
