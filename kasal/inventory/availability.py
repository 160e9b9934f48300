"""
Date-window availability for item variations.

A booking occupies a variation for a window of ``RENTAL_WINDOW_DAYS`` after
its start date. Stock held by active rentals has already been taken off the
shelf, so a variation's owned count is the shelf quantity plus those held
units; everything booked into the requested window is then subtracted from it.
"""
import logging
from collections import Counter
from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Sum

from kasal.catalog.models import ItemVariation

logger = logging.getLogger(__name__)


def rental_window(start_date):
    """Return (start, end) for a rental starting on ``start_date``"""
    return start_date, start_date + timedelta(days=settings.KASAL_RENTAL['RENTAL_WINDOW_DAYS'])


def _tally(counter, rows, key='total'):
    for row in rows:
        if row['variation_id'] is not None:
            counter[row['variation_id']] += row[key]


def rental_holdings(variation_ids, rental_filter):
    """Units per variation held by rentals matching ``rental_filter`` (a dict of Rental lookups)"""
    from kasal.rentals.models import RentalItem, PackageFulfillment

    held = Counter()
    item_filter = {f'rental__{key}': value for key, value in rental_filter.items()}
    _tally(held, RentalItem.objects.filter(variation_id__in=variation_ids, **item_filter)
           .values('variation_id').annotate(total=Sum('quantity')))

    fulfillment_filter = {f'rental_package__rental__{key}': value for key, value in rental_filter.items()}
    _tally(held, PackageFulfillment.objects.filter(variation_id__in=variation_ids, is_custom=False, **fulfillment_filter)
           .values('variation_id').annotate(total=Count('id')))
    return held


def reservation_holdings(variation_ids, reservation_filter):
    """Units per variation requested by reservations matching ``reservation_filter``"""
    from kasal.bookings.models import ItemReservation, FulfillmentPreview

    held = Counter()
    item_filter = {f'reservation__{key}': value for key, value in reservation_filter.items()}
    _tally(held, ItemReservation.objects.filter(variation_id__in=variation_ids, **item_filter)
           .values('variation_id').annotate(total=Sum('quantity')))

    preview_filter = {f'package_reservation__reservation__{key}': value for key, value in reservation_filter.items()}
    _tally(held, FulfillmentPreview.objects.filter(variation_id__in=variation_ids, is_custom=False, **preview_filter)
           .values('variation_id').annotate(total=Count('id')))
    return held


def check_availability(requested, start_date, exclude_rental_id=None, exclude_reservation_id=None):
    """
    Check whether ``requested`` (Counter of variation id -> units) fits the
    window starting at ``start_date``.

    Args:
        requested: Counter keyed by ItemVariation id
        start_date: first day of the window
        exclude_rental_id: rental being rescheduled; its own lines are not counted as bookings
        exclude_reservation_id: same for a reservation

    Returns:
        {'is_available': bool, 'conflicting_items': [{name, variation, requested, available}]}
    """
    from kasal.rentals.models import Rental
    from kasal.bookings.models import Reservation

    needed = {vid: qty for vid, qty in requested.items() if vid is not None and qty > 0}
    if not needed:
        return {'is_available': True, 'conflicting_items': []}

    window_start, window_end = rental_window(start_date)
    variation_ids = list(needed)
    variations = ItemVariation.objects.select_related('item').in_bulk(variation_ids)

    held_now = rental_holdings(variation_ids, {'status__in': Rental.ACTIVE_STATUSES})

    overlapping = {
        'status__in': Rental.ACTIVE_STATUSES,
        'rental_start_date__lte': window_end,
        'rental_end_date__gte': window_start,
    }
    booked = rental_holdings(variation_ids, overlapping)
    if exclude_rental_id:
        booked.subtract(rental_holdings(variation_ids, {'id': exclude_rental_id, **overlapping}))

    reserved_window = {
        'status__in': Reservation.ACTIVE_STATUSES,
        'reserve_date__gte': window_start - timedelta(days=settings.KASAL_RENTAL['RENTAL_WINDOW_DAYS']),
        'reserve_date__lte': window_end,
    }
    booked.update(reservation_holdings(variation_ids, reserved_window))
    if exclude_reservation_id:
        booked.subtract(reservation_holdings(variation_ids, {'id': exclude_reservation_id, **reserved_window}))

    conflicting_items = []
    for vid, qty in needed.items():
        variation = variations.get(vid)
        if variation is None:
            conflicting_items.append({'name': 'Unknown Item', 'variation': str(vid), 'requested': qty, 'available': 0})
            continue
        owned = variation.quantity + held_now[vid]
        available = max(owned - booked[vid], 0)
        if qty > available:
            conflicting_items.append({
                'name': variation.item.name,
                'variation': variation.label,
                'requested': qty,
                'available': available,
            })

    if conflicting_items:
        logger.info(f"Availability conflict for window {window_start}..{window_end}: {conflicting_items}")
    return {'is_available': not conflicting_items, 'conflicting_items': conflicting_items}
