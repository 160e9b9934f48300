"""
Stock movements on item variations.

Quantities are keyed by ItemVariation id in ``collections.Counter`` objects.
Decrements lock the affected rows first so two rentals cannot take the last
unit; increments use ``F()`` updates. Callers wrap these in the same
``transaction.atomic()`` block as the document change they belong to.
"""
import logging
from collections import Counter

from django.db import transaction
from django.db.models import F

from kasal.catalog.models import ItemVariation
from kasal.core.exceptions import BusinessRuleViolation, StockConflict

logger = logging.getLogger(__name__)


def _positive(quantities):
    return {vid: qty for vid, qty in quantities.items() if vid is not None and qty > 0}


def reserve_stock(requirements):
    """Check and decrement stock for every variation in ``requirements``

    Raises StockConflict listing every short line; nothing is decremented
    unless all lines can be satisfied.
    """
    needed = _positive(requirements)
    if not needed:
        return

    with transaction.atomic():
        variations = ItemVariation.objects.select_for_update().select_related('item').in_bulk(list(needed))

        missing = [vid for vid in needed if vid not in variations]
        if missing:
            raise BusinessRuleViolation(f"Item variation(s) no longer exist: {', '.join(str(vid) for vid in missing)}")

        shortages = []
        for vid, qty in needed.items():
            variation = variations[vid]
            if variation.quantity < qty:
                shortages.append({
                    'variation_id': vid,
                    'name': variation.item.name,
                    'variation': variation.label,
                    'available': variation.quantity,
                    'requested': qty,
                })

        if shortages:
            message = '; '.join(
                f"Insufficient stock for {s['name']} ({s['variation']}). Available: {s['available']}, Requested: {s['requested']}"
                for s in shortages
            )
            raise StockConflict(message, shortages=shortages)

        for vid, qty in needed.items():
            ItemVariation.objects.filter(id=vid).update(quantity=F('quantity') - qty)
            logger.debug(f"Reserved {qty} of variation {vid}")


def release_stock(quantities):
    """Increment stock for every variation in ``quantities``; vanished variations are skipped"""
    returned = _positive(quantities)
    for vid, qty in returned.items():
        updated = ItemVariation.objects.filter(id=vid).update(quantity=F('quantity') + qty)
        if not updated:
            logger.warning(f"Could not restore {qty} unit(s) to variation {vid}: variation no longer exists")


def apply_stock_delta(delta):
    """Apply a signed change: positive values take stock, negative values return it"""
    take = Counter({vid: qty for vid, qty in delta.items() if qty > 0})
    give_back = Counter({vid: -qty for vid, qty in delta.items() if qty < 0})
    reserve_stock(take)
    release_stock(give_back)


def describe(quantities):
    """JSON-friendly form for audit logs"""
    return {str(vid): qty for vid, qty in quantities.items() if qty}
