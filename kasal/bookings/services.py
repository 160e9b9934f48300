"""Reservation lines, demand and appointment slot rules"""
import logging
from collections import Counter

from kasal.core.cache_utils import get_cached_shop_settings
from kasal.core.exceptions import BusinessRuleViolation
from kasal.rentals.services import fulfillment_demand
from .models import (
    Appointment, ItemReservation, PackageReservation, FulfillmentPreview, Unavailability, TIME_BLOCK_CHOICES
)

logger = logging.getLogger(__name__)


def reservation_lines_demand(item_lines, package_lines):
    """Demand of a reservation payload: item quantities plus one unit per assigned preview row"""
    demand = Counter()
    for line in item_lines:
        demand[line['variation_id']] += line['quantity']
    for line in package_lines:
        demand.update(fulfillment_demand(line['fulfillment_preview']))
    return demand


def reservation_demand(reservation):
    demand = Counter()
    for line in reservation.item_reservations.all():
        if line.variation_id:
            demand[line.variation_id] += line.quantity
    for line in reservation.package_reservations.all():
        demand.update(fulfillment_demand(line.fulfillment_preview.all()))
    return demand


def appointment_load(day):
    """Booked appointments on ``day`` per time block, with the shop's daily capacity"""
    counts = {block: 0 for block, _ in TIME_BLOCK_CHOICES}
    booked = Appointment.objects.filter(appointment_date=day, status__in=Appointment.BOOKED_STATUSES)
    for block in booked.values_list('time_block', flat=True):
        counts[block] = counts.get(block, 0) + 1

    capacity = get_cached_shop_settings().appointment_slots_per_day
    total = sum(counts.values())
    return {
        'date': str(day),
        'counts': counts,
        'total': total,
        'capacity': capacity,
        'is_full': total >= capacity,
    }


def ensure_appointment_slot(day, time_block, exclude_id=None):
    """Raise BusinessRuleViolation when ``day`` is closed or fully booked"""
    closure = Unavailability.objects.filter(date=day).first()
    if closure:
        # Half-day closures only shut the afternoon block
        if closure.is_full_day or time_block == 'afternoon':
            raise BusinessRuleViolation(f'The shop is unavailable on {day}: {closure.reason}')

    load = appointment_load(day)
    total = load['total']
    if exclude_id and Appointment.objects.filter(
            id=exclude_id, appointment_date=day, status__in=Appointment.BOOKED_STATUSES).exists():
        total -= 1
    if total >= load['capacity']:
        raise BusinessRuleViolation(f'All appointment slots on {day} are fully booked.')


def create_reservation_lines(reservation, item_lines, package_lines, variations, packages):
    """Write item and package lines using catalogue prices"""
    for line in item_lines:
        variation = variations[line['variation_id']]
        ItemReservation.objects.create(
            reservation=reservation,
            item=variation.item,
            variation=variation,
            item_name=variation.item.name,
            color_name=variation.color_name,
            color_hex=variation.color_hex,
            size=variation.size,
            image_url=variation.image_url,
            quantity=line['quantity'],
            price=variation.item.price,
        )

    previews = []
    for line in package_lines:
        package = packages[line['package_id']]
        package_reservation = PackageReservation.objects.create(
            reservation=reservation,
            package=package,
            package_name=package.name,
            motif_hex=line['motif_hex'],
            motif_name=line['motif_name'] or 'Manual',
            image_url=package.image_urls[0] if package.image_urls else '',
            price=package.price,
        )
        for row in line['fulfillment_preview']:
            variation = variations.get(row['variation_id']) if not row['is_custom'] else None
            previews.append(FulfillmentPreview.objects.create(
                package_reservation=package_reservation,
                role=row['role'],
                wearer_name=row['wearer_name'],
                is_custom=row['is_custom'],
                item=variation.item if variation else None,
                variation=variation,
                variation_label=variation.label if variation else '',
                notes=row['notes'],
            ))
    return previews


def create_linked_appointments(reservation, previews):
    """One pending appointment per custom preview row, on the reservation's package appointment date"""
    custom_rows = [row for row in previews if row.is_custom and row.linked_appointment_id is None]
    if not custom_rows:
        return []
    if not reservation.package_appointment_date:
        logger.warning(f"Skipping appointment creation for reservation {reservation.id}: no package appointment date")
        return []

    day = reservation.package_appointment_date
    time_block = reservation.package_appointment_block or 'morning'
    appointments = []
    for row in custom_rows:
        # Each custom role takes its own slot
        ensure_appointment_slot(day, time_block)
        appointment = Appointment(
            appointment_date=day,
            time_block=time_block,
            notes=row.notes,
            source_reservation=reservation,
        )
        appointment.set_customer_info(reservation.customer_info)
        appointment.save()
        row.linked_appointment = appointment
        row.save(update_fields=['linked_appointment'])
        appointments.append(appointment)
    return appointments
