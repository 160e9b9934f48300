"""
Rental line construction and stock accounting.

Demand is always expressed as a ``Counter`` of ItemVariation id -> units:
single items count their quantity, every non-custom package role with an
assigned variation counts one unit. The views combine these helpers with
``kasal.inventory.stock`` inside one ``transaction.atomic()`` block.
"""
import logging
from collections import Counter

from kasal.catalog.models import ItemVariation, Package
from kasal.core.exceptions import BusinessRuleViolation
from kasal.inventory.stock import release_stock
from .models import RentalItem, RentalPackage, CustomTailoringItem, PackageFulfillment

logger = logging.getLogger(__name__)


def single_items_demand(lines):
    demand = Counter()
    for line in lines:
        demand[line['variation_id']] += line['quantity']
    return demand


def fulfillment_demand(rows):
    """Units needed by fulfillment input rows (dicts) or PackageFulfillment objects"""
    demand = Counter()
    for row in rows:
        if isinstance(row, dict):
            is_custom, variation_id = row.get('is_custom'), row.get('variation_id')
        else:
            is_custom, variation_id = row.is_custom, row.variation_id
        if not is_custom and variation_id:
            demand[variation_id] += 1
    return demand


def package_rents_demand(lines):
    demand = Counter()
    for line in lines:
        demand.update(fulfillment_demand(line['fulfillment']))
    return demand


def lines_demand(single_items=(), package_rents=()):
    demand = single_items_demand(single_items)
    demand.update(package_rents_demand(package_rents))
    return demand


def package_demand(rental_package):
    return fulfillment_demand(rental_package.fulfillments.all())


def rental_demand(rental):
    """Units of each variation currently assigned to ``rental``"""
    demand = Counter()
    for line in rental.items.all():
        if line.variation_id:
            demand[line.variation_id] += line.quantity
    for rental_package in rental.packages.all():
        demand.update(package_demand(rental_package))
    return demand


def restore_rental_stock(rental, damaged=None):
    """Put a rental's units back on the shelf, minus any ``damaged`` Counter; returns what was restored"""
    restored = rental_demand(rental)
    if damaged:
        restored.subtract(damaged)
    restored = Counter({vid: qty for vid, qty in restored.items() if qty > 0})
    release_stock(restored)
    logger.info(f"Restored stock for rental {rental.id}: {dict(restored)}")
    return restored


def load_variations(variation_ids):
    """Fetch variations by id, raising when any is missing"""
    ids = {vid for vid in variation_ids if vid}
    variations = ItemVariation.objects.select_related('item').in_bulk(list(ids))
    missing = sorted(ids - set(variations))
    if missing:
        raise BusinessRuleViolation(f"Item variation(s) not found: {', '.join(str(vid) for vid in missing)}")
    return variations


def load_packages(package_ids):
    ids = set(package_ids)
    packages = Package.objects.in_bulk(list(ids))
    missing = sorted(ids - set(packages))
    if missing:
        raise BusinessRuleViolation(f"Package(s) not found: {', '.join(str(pid) for pid in missing)}")
    return packages


def _first_image(image_urls):
    return image_urls[0] if image_urls else ''


def upsert_custom_items(rental, lines, source_appointment=None):
    """Create or update custom pieces keyed by reference; returns {reference: CustomTailoringItem}"""
    existing = {item.reference: item for item in rental.custom_items.all()}
    saved = {}
    for line in lines:
        data = dict(line)
        reference = data.pop('reference', '') or ''
        item = existing.get(reference) if reference else None
        if item:
            for attr, value in data.items():
                setattr(item, attr, value)
            item.save()
        else:
            if reference:
                data['reference'] = reference
            item = CustomTailoringItem.objects.create(rental=rental, source_appointment=source_appointment, **data)
        saved[item.reference] = item
    return saved


def add_single_items(rental, lines, variations, merge=False):
    """Attach single item lines using catalogue prices; ``merge`` folds repeats into existing lines"""
    existing = {line.variation_id: line for line in rental.items.all()} if merge else {}
    for line in lines:
        variation = variations[line['variation_id']]
        current = existing.get(variation.id)
        if current:
            current.quantity += line['quantity']
            current.save(update_fields=['quantity'])
            continue
        existing[variation.id] = RentalItem.objects.create(
            rental=rental,
            item=variation.item,
            variation=variation,
            name=variation.item.name,
            color_name=variation.color_name,
            color_hex=variation.color_hex,
            size=variation.size,
            price=variation.item.price,
            quantity=line['quantity'],
            image_url=variation.image_url,
            notes=line.get('notes', ''),
        )


def write_fulfillments(rental_package, rows, variations, custom_items):
    """Replace a rental package's fulfillment rows"""
    rental_package.fulfillments.all().delete()
    for row in rows:
        variation = variations.get(row.get('variation_id')) if not row['is_custom'] else None
        custom_item = None
        if row['is_custom'] and row.get('custom_item_reference'):
            custom_item = custom_items.get(row['custom_item_reference'])
            if custom_item is None:
                raise BusinessRuleViolation(f"Custom item {row['custom_item_reference']} not found on this rental.")
        PackageFulfillment.objects.create(
            rental_package=rental_package,
            role=row['role'],
            wearer_name=row.get('wearer_name', ''),
            is_custom=row['is_custom'],
            item=variation.item if variation else None,
            variation=variation,
            assigned_name=variation.item.name if variation else (custom_item.name if custom_item else ''),
            variation_label=variation.label if variation else '',
            image_url=variation.image_url if variation else '',
            custom_item=custom_item,
        )


def add_packages(rental, lines, variations, custom_items):
    packages = load_packages(line['package_id'] for line in lines)
    for line in lines:
        package = packages[line['package_id']]
        rental_package = RentalPackage.objects.create(
            rental=rental,
            package=package,
            name=package.name,
            motif_name=line.get('motif_name') or 'Manual',
            motif_hex=line.get('motif_hex', ''),
            price=package.price,
            quantity=line['quantity'],
            image_url=_first_image(package.image_urls),
            notes=line.get('notes', ''),
        )
        write_fulfillments(rental_package, line['fulfillment'], variations, custom_items)


def add_lines(rental, single_items=(), package_rents=(), custom_items=(), merge=False):
    """Create all lines of a rental payload; stock is handled by the caller"""
    variations = load_variations(
        [line['variation_id'] for line in single_items]
        + [row.get('variation_id') for line in package_rents for row in line['fulfillment']]
    )
    saved_custom = upsert_custom_items(rental, custom_items)
    custom_lookup = {item.reference: item for item in rental.custom_items.all()}
    custom_lookup.update(saved_custom)
    add_single_items(rental, single_items, variations, merge=merge)
    add_packages(rental, package_rents, variations, custom_lookup)


def pre_pickup_warnings(rental):
    """Human-readable problems worth checking before the customer collects the rental"""
    warnings = []
    for rental_package in rental.packages.all():
        incomplete = [row.role for row in rental_package.fulfillments.all() if not row.is_assigned]
        if incomplete:
            warnings.append(f'In package "{rental_package.name}", the following roles are incomplete: {", ".join(incomplete)}.')

    for item in rental.custom_items.all():
        if not item.measurements:
            warnings.append(f'Custom item "{item.name}" is missing required measurements.')
        if not item.materials or not str(item.materials[0]).strip():
            warnings.append(f'Custom item "{item.name}" is missing material specifications.')
    return warnings
