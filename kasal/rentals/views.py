import logging
from collections import Counter

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from django.utils import timezone

from kasal.bookings.models import Reservation
from kasal.bookings.services import reservation_demand
from kasal.catalog.models import Item, ItemVariation
from kasal.catalog.serializers import ItemSerializer
from kasal.core.exceptions import AvailabilityConflict, BusinessRuleViolation
from kasal.core.permissions import role_permission
from kasal.core.sanitizers import sanitize_payload
from kasal.core.utils import create_audit_log, parse_date
from kasal.inventory.availability import check_availability, rental_window
from kasal.inventory.models import DamagedItem
from kasal.inventory.stock import reserve_stock, release_stock, apply_stock_delta, describe
from .emails import send_return_reminder
from .financials import rental_financials
from .models import Rental, RentalItem, RentalPackage, CustomTailoringItem, PackageFulfillment, Payment
from .serializers import (
    RentalSerializer, CustomTailoringItemSerializer, RentalCreateSerializer, RentalLinesInputSerializer,
    RentalProcessSerializer, RentalItemUpdateSerializer, PackageUpdateSerializer, CustomerUpdateSerializer,
    ProcessReturnSerializer, InventoryConversionSerializer
)
from .services import (
    lines_demand, rental_demand, package_demand, fulfillment_demand, restore_rental_stock, add_lines,
    load_variations, upsert_custom_items, write_fulfillments, pre_pickup_warnings
)

logger = logging.getLogger(__name__)

ManageRentals = role_permission('manage_rentals')


def _rental_queryset():
    return Rental.objects.select_related('created_by').prefetch_related(
        'items', 'packages__fulfillments__custom_item', 'custom_items', 'payments'
    )


def rental_response(rental_id, status_code=status.HTTP_200_OK):
    return Response(RentalSerializer(_rental_queryset().get(pk=rental_id)).data, status=status_code)


def _locked_rental(pk):
    return get_object_or_404(Rental.objects.select_for_update(), pk=pk)


def _require_editable(rental, action='modify'):
    if not rental.is_editable:
        raise BusinessRuleViolation(f'Cannot {action} a rental with status "{rental.status}".')


def _conflict_message(prefix, conflicting_items):
    names = ", ".join(f"{item['name']} ({item['variation']})" for item in conflicting_items)
    return f"{prefix}: {names}"


@api_view(['GET', 'POST'])
@permission_classes([ManageRentals])
def rental_list_create(request):
    """List rentals (newest first, with financials) or create a rental and take its stock"""
    if request.method == 'GET':
        queryset = _rental_queryset().order_by('-created_at')
        phone = request.query_params.get('phone')
        if phone:
            queryset = queryset.filter(customer_phone__icontains=phone)
        rental_status = request.query_params.get('status')
        if rental_status:
            queryset = queryset.filter(status=rental_status)
        return Response(RentalSerializer(queryset, many=True).data)

    serializer = RentalCreateSerializer(data=sanitize_payload(request.data))
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    start_date = data['rental_start_date'] or timezone.localdate()
    end_date = data['rental_end_date'] or rental_window(start_date)[1]
    requested = lines_demand(data['single_items'], data['package_rents'])

    with transaction.atomic():
        load_variations(requested)
        availability = check_availability(requested, start_date)
        if not availability['is_available']:
            raise AvailabilityConflict(
                availability['conflicting_items'],
                detail=_conflict_message('One or more selected items are unavailable', availability['conflicting_items']),
            )
        reserve_stock(requested)

        rental = Rental(
            rental_start_date=start_date,
            rental_end_date=end_date,
            shop_discount=data['shop_discount'],
            deposit_amount=data['deposit_amount'],
            created_by=request.user,
        )
        rental.set_customer_info(data['customer_info'])
        rental.save()
        add_lines(rental, data['single_items'], data['package_rents'], data['custom_items'])

        if data['payment']:
            Payment.objects.create(rental=rental, **data['payment'])

        create_audit_log(
            request=request,
            action='create',
            model_name='Rental',
            object_id=rental.id,
            object_name=rental.customer_name,
            object_reference=rental.id,
            changes={'stock_reserved': describe(requested), 'start_date': str(start_date)}
        )

    logger.info(f"Rental {rental.id} created for {rental.customer_name} ({sum(requested.values())} unit(s) reserved)")
    return rental_response(rental.id, status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([ManageRentals])
def rental_detail(request, pk):
    """Retrieve a rental, or delete it and give back any stock it still holds"""
    if request.method == 'GET':
        rental = get_object_or_404(_rental_queryset(), pk=pk)
        return Response(RentalSerializer(rental).data)

    with transaction.atomic():
        rental = _locked_rental(pk)
        restored = restore_rental_stock(rental) if rental.holds_stock else Counter()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Rental',
            object_id=rental.id,
            object_name=rental.customer_name,
            object_reference=rental.id,
            changes={'status': rental.status, 'stock_released': describe(restored)}
        )
        rental.delete()

    return Response({'success': True, 'message': f'Rental {pk} deleted and stock restored successfully.'})


@api_view(['POST'])
@permission_classes([ManageRentals])
def rental_send_reminder(request, pk):
    rental = get_object_or_404(Rental, pk=pk)
    if not rental.customer_email:
        return Response({'error': 'Cannot send reminder: Customer email address is missing.'}, status=status.HTTP_400_BAD_REQUEST)

    send_return_reminder(rental)
    rental.return_reminder_sent = True
    rental.save(update_fields=['return_reminder_sent', 'updated_at'])

    create_audit_log(
        request=request,
        action='reminder_sent',
        model_name='Rental',
        object_id=rental.id,
        object_reference=rental.id,
        changes={'email': rental.customer_email}
    )
    return rental_response(rental.id)


def _has_returnable_lines(rental):
    return (
        rental.items.exists()
        or rental.packages.exists()
        or rental.custom_items.filter(tailoring_type=CustomTailoringItem.RENT_BACK).exists()
    )


@api_view(['PUT'])
@permission_classes([ManageRentals])
def rental_process(request, pk):
    """
    Move a rental through its lifecycle and record money against it.

    Pending -> To Pickup, To Pickup -> To Return (pickup today, due back after
    the rental window; purchase-only rentals complete immediately) and
    To Return -> Returned, which restores stock and completes the rental.
    """
    serializer = RentalProcessSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        rental = _locked_rental(pk)
        original_status = rental.status
        new_status = data.get('status')
        changes = {}

        if new_status and new_status != original_status:
            today = timezone.localdate()
            if new_status == 'Cancelled':
                raise BusinessRuleViolation('Use the cancel action to cancel a rental; a reason is required.')
            if original_status == 'Pending' and new_status == 'To Pickup':
                rental.status = 'To Pickup'
            elif original_status == 'To Pickup' and new_status == 'To Return':
                if _has_returnable_lines(rental):
                    rental.status = 'To Return'
                    rental.rental_start_date, rental.rental_end_date = rental_window(today)
                else:
                    rental.status = 'Completed'
                    rental.rental_start_date = rental.rental_end_date = today
            elif original_status == 'To Return' and new_status in ('Returned', 'Completed'):
                restored = restore_rental_stock(rental)
                changes['stock_released'] = describe(restored)
                rental.status = 'Completed'
            else:
                raise BusinessRuleViolation(f'Cannot change rental status from "{original_status}" to "{new_status}".')
            changes['status'] = {'old': original_status, 'new': rental.status}

        for field in ('shop_discount', 'deposit_amount'):
            if field in data:
                changes[field] = {'old': str(getattr(rental, field)), 'new': str(data[field])}
                setattr(rental, field, data[field])

        if 'deposit_reimbursed' in data:
            deposit = rental_financials(rental)['deposit_amount']
            if data['deposit_reimbursed'] > deposit:
                raise BusinessRuleViolation(
                    f"Reimbursement amount of {data['deposit_reimbursed']} exceeds the paid deposit of {deposit}."
                )
            changes['deposit_reimbursed'] = str(data['deposit_reimbursed'])
            rental.deposit_reimbursed = data['deposit_reimbursed']

        rental.save()

        if data.get('payment'):
            payment = Payment.objects.create(rental=rental, **data['payment'])
            create_audit_log(
                request=request,
                action='payment_add',
                model_name='Rental',
                object_id=rental.id,
                object_reference=rental.id,
                changes={'amount': str(payment.amount), 'method': payment.method}
            )

        if changes:
            create_audit_log(
                request=request,
                action='status_change' if 'status' in changes else 'update',
                model_name='Rental',
                object_id=rental.id,
                object_name=rental.customer_name,
                object_reference=rental.id,
                changes=changes
            )

    return rental_response(rental.id)


@api_view(['PUT'])
@permission_classes([ManageRentals])
def rental_reschedule(request, pk):
    """Move a rental to a new start date if its lines are free for the new window"""
    try:
        new_start = parse_date(request.data.get('new_start_date'), 'new_start_date')
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        rental = _locked_rental(pk)
        if not rental.is_editable:
            raise BusinessRuleViolation("Only rentals with 'Pending' or 'To Pickup' status can be rescheduled.")

        availability = check_availability(rental_demand(rental), new_start, exclude_rental_id=rental.id)
        if not availability['is_available']:
            raise AvailabilityConflict(
                availability['conflicting_items'],
                detail=_conflict_message('Cannot reschedule', availability['conflicting_items']),
            )

        old_dates = [str(rental.rental_start_date), str(rental.rental_end_date)]
        rental.rental_start_date, rental.rental_end_date = rental_window(new_start)
        rental.save(update_fields=['rental_start_date', 'rental_end_date', 'updated_at'])
        create_audit_log(
            request=request,
            action='reschedule',
            model_name='Rental',
            object_id=rental.id,
            object_reference=rental.id,
            changes={'old': old_dates, 'new': [str(rental.rental_start_date), str(rental.rental_end_date)]}
        )

    return rental_response(rental.id)


@api_view(['GET'])
@permission_classes([ManageRentals])
def rental_check_reschedule(request, pk):
    """Dry run of reschedule: report conflicts for ?date= without changing anything"""
    rental = get_object_or_404(_rental_queryset(), pk=pk)
    try:
        new_start = parse_date(request.query_params.get('date'), 'date')
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(check_availability(rental_demand(rental), new_start, exclude_rental_id=rental.id))


@api_view(['PUT'])
@permission_classes([ManageRentals])
def rental_add_items(request, pk):
    """Add single items, packages or custom pieces to an open rental"""
    serializer = RentalLinesInputSerializer(data=sanitize_payload(request.data))
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        rental = _locked_rental(pk)
        _require_editable(rental, 'add items to')

        requested = lines_demand(data['single_items'], data['package_rents'])
        load_variations(requested)
        reserve_stock(requested)
        add_lines(rental, data['single_items'], data['package_rents'], data['custom_items'], merge=True)

        create_audit_log(
            request=request,
            action='stock_reserve',
            model_name='Rental',
            object_id=rental.id,
            object_reference=rental.id,
            changes={
                'stock_reserved': describe(requested),
                'custom_items_added': len(data['custom_items']),
            }
        )

    return rental_response(rental.id)


@api_view(['PUT', 'DELETE'])
@permission_classes([ManageRentals])
def rental_item_detail(request, pk, item_id):
    """Change quantity or variation of a single item line, or remove it"""
    with transaction.atomic():
        rental = _locked_rental(pk)
        line = get_object_or_404(RentalItem, pk=item_id, rental=rental)
        _require_editable(rental)

        if request.method == 'DELETE':
            release_stock(Counter({line.variation_id: line.quantity}))
            create_audit_log(
                request=request,
                action='stock_release',
                model_name='Rental',
                object_id=rental.id,
                object_reference=rental.id,
                changes={'removed_item': line.name, 'variation': line.variation_label, 'quantity': line.quantity}
            )
            line.delete()
            return rental_response(rental.id)

        serializer = RentalItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        quantity = data['quantity']
        new_variation_id = data.get('variation_id') or line.variation_id

        if new_variation_id != line.variation_id:
            new_variation = get_object_or_404(ItemVariation.objects.select_related('item'), pk=new_variation_id)
            if line.item_id and new_variation.item_id != line.item_id:
                raise BusinessRuleViolation('A line can only be switched to another variation of the same item.')
            reserve_stock(Counter({new_variation.id: quantity}))
            release_stock(Counter({line.variation_id: line.quantity}))
            changes = {'variation': {'old': line.variation_label, 'new': new_variation.label}}
            line.variation = new_variation
            line.color_name = new_variation.color_name
            line.color_hex = new_variation.color_hex
            line.size = new_variation.size
            line.image_url = new_variation.image_url
        else:
            apply_stock_delta(Counter({line.variation_id: quantity - line.quantity}))
            changes = {}

        changes['quantity'] = {'old': line.quantity, 'new': quantity}
        line.quantity = quantity
        if 'notes' in data:
            line.notes = data['notes']
        line.save()

        create_audit_log(
            request=request,
            action='update',
            model_name='Rental',
            object_id=rental.id,
            object_reference=rental.id,
            changes={'item': line.name, **changes}
        )

    return rental_response(rental.id)


@api_view(['PUT', 'DELETE'])
@permission_classes([ManageRentals])
def rental_package_detail(request, pk, package_id):
    """
    PUT replaces a rented package's fulfillment in one step: stock moves by
    the difference between the old and new assignments, and linked custom
    pieces are created, updated or removed alongside. DELETE gives back every
    assigned unit and removes the package's custom pieces.
    """
    with transaction.atomic():
        rental = _locked_rental(pk)
        rental_package = get_object_or_404(RentalPackage, pk=package_id, rental=rental)
        _require_editable(rental)
        old_demand = package_demand(rental_package)

        if request.method == 'DELETE':
            custom_ids = [row.custom_item_id for row in rental_package.fulfillments.all() if row.custom_item_id]
            release_stock(old_demand)
            CustomTailoringItem.objects.filter(rental=rental, id__in=custom_ids).delete()
            create_audit_log(
                request=request,
                action='stock_release',
                model_name='Rental',
                object_id=rental.id,
                object_reference=rental.id,
                changes={'removed_package': rental_package.display_name, 'stock_released': describe(old_demand)}
            )
            rental_package.delete()
            return rental_response(rental.id)

        serializer = PackageUpdateSerializer(data=sanitize_payload(request.data))
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        new_demand = fulfillment_demand(data['fulfillment'])
        variations = load_variations(new_demand)
        delta = Counter(new_demand)
        delta.subtract(old_demand)
        apply_stock_delta(delta)

        if data['custom_item_references_to_delete']:
            rental.custom_items.filter(reference__in=data['custom_item_references_to_delete']).delete()
        upsert_custom_items(rental, data['custom_items'])
        custom_lookup = {item.reference: item for item in rental.custom_items.all()}
        write_fulfillments(rental_package, data['fulfillment'], variations, custom_lookup)

        if 'notes' in data:
            rental_package.notes = data['notes']
            rental_package.save(update_fields=['notes'])

        create_audit_log(
            request=request,
            action='update',
            model_name='Rental',
            object_id=rental.id,
            object_reference=rental.id,
            changes={'package': rental_package.display_name, 'stock_delta': describe(delta)}
        )

    return rental_response(rental.id)


@api_view(['PUT'])
@permission_classes([ManageRentals])
def rental_customer(request, pk):
    rental = get_object_or_404(Rental, pk=pk)
    serializer = CustomerUpdateSerializer(data=sanitize_payload(request.data))
    if not serializer.is_valid():
        return Response({'error': 'Incomplete customer information provided.', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    old = rental.customer_info
    rental.set_customer_info(serializer.validated_data)
    rental.save()
    create_audit_log(
        request=request,
        action='update',
        model_name='Rental',
        object_id=rental.id,
        object_reference=rental.id,
        changes={'customer_info': {'old': old, 'new': rental.customer_info}}
    )
    return rental_response(rental.id)


@api_view(['PUT', 'DELETE'])
@permission_classes([ManageRentals])
def rental_custom_item_detail(request, pk, item_id):
    rental = get_object_or_404(Rental, pk=pk)
    custom_item = get_object_or_404(CustomTailoringItem, pk=item_id, rental=rental)
    _require_editable(rental)

    if request.method == 'DELETE':
        create_audit_log(
            request=request,
            action='delete',
            model_name='CustomTailoringItem',
            object_id=custom_item.id,
            object_name=custom_item.name,
            object_reference=rental.id,
        )
        custom_item.delete()
        return rental_response(rental.id)

    serializer = CustomTailoringItemSerializer(custom_item, data=sanitize_payload(request.data), partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return rental_response(rental.id)


@api_view(['GET'])
@permission_classes([ManageRentals])
def rental_pre_pickup_validation(request, pk):
    rental = get_object_or_404(_rental_queryset(), pk=pk)
    return Response({'warnings': pre_pickup_warnings(rental)})


@api_view(['POST'])
@permission_classes([ManageRentals])
def rental_from_reservation(request):
    """Turn a reservation into a rental: take its stock, copy its lines and payments, and close it"""
    reservation_id = (request.data.get('reservation_id') or '').strip().upper()
    if not reservation_id:
        return Response({'error': 'Reservation ID is required.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        reservation = get_object_or_404(Reservation.objects.select_for_update(), pk=reservation_id)
        if reservation.status in Reservation.CLOSED_STATUSES:
            raise BusinessRuleViolation(
                f'Cannot create rental from a reservation with status "{reservation.status}".'
            )

        item_lines = list(reservation.item_reservations.all())
        package_lines = list(reservation.package_reservations.prefetch_related('fulfillment_preview'))
        requested = reservation_demand(reservation)
        reserve_stock(requested)

        start_date, end_date = rental_window(reservation.reserve_date)
        rental = Rental(
            rental_start_date=start_date,
            rental_end_date=end_date,
            shop_discount=reservation.shop_discount,
            deposit_amount=reservation.deposit_amount,
            source_reservation=reservation,
            created_by=request.user,
        )
        rental.set_customer_info(reservation.customer_info)
        rental.save()

        for line in item_lines:
            RentalItem.objects.create(
                rental=rental,
                item=line.item,
                variation=line.variation,
                name=line.item_name,
                color_name=line.color_name,
                color_hex=line.color_hex,
                size=line.size,
                price=line.price,
                quantity=line.quantity,
                image_url=line.image_url,
            )
        for line in package_lines:
            rental_package = RentalPackage.objects.create(
                rental=rental,
                package=line.package,
                name=line.package_name,
                motif_name=line.motif_name,
                motif_hex=line.motif_hex,
                price=line.price,
                quantity=1,
                image_url=line.image_url,
            )
            for row in line.fulfillment_preview.all():
                PackageFulfillment.objects.create(
                    rental_package=rental_package,
                    role=row.role,
                    wearer_name=row.wearer_name,
                    is_custom=row.is_custom,
                    item=row.item,
                    variation=row.variation if not row.is_custom else None,
                    assigned_name=row.item.name if row.item and not row.is_custom else '',
                    variation_label=row.variation_label,
                    image_url=row.variation.image_url if row.variation and not row.is_custom else '',
                )

        reservation.payments.update(rental=rental)
        reservation.appointments.update(rental=rental)
        reservation.status = 'Completed'
        reservation.save(update_fields=['status', 'updated_at'])

        create_audit_log(
            request=request,
            action='convert',
            model_name='Reservation',
            object_id=reservation.id,
            object_name=reservation.customer_name,
            object_reference=rental.id,
            changes={'rental': rental.id, 'stock_reserved': describe(requested)}
        )

    logger.info(f"Reservation {reservation.id} converted to rental {rental.id}")
    return rental_response(rental.id, status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([ManageRentals])
def rental_process_return(request, pk):
    """
    Check a rental back in.

    Damaged units become DamagedItem records awaiting repair and stay off
    the shelf; everything else is restored. Undamaged rent-back pieces are
    queued for conversion into inventory.
    """
    serializer = ProcessReturnSerializer(data=sanitize_payload(request.data))
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        rental = _locked_rental(pk)
        if rental.status != 'To Return':
            raise BusinessRuleViolation(f'Cannot process return for a rental with status "{rental.status}".')

        held = rental_demand(rental)
        custom_items = {item.id: item for item in rental.custom_items.all()}
        damaged_units = Counter()
        damaged_custom = set()

        for line in data['damaged_items']:
            if line['variation_id']:
                damaged_units[line['variation_id']] += line['quantity']
            else:
                if line['custom_item_id'] not in custom_items:
                    raise BusinessRuleViolation(f"Custom item {line['custom_item_id']} is not part of this rental.")
                custom_item = custom_items[line['custom_item_id']]
                if line['quantity'] > custom_item.quantity:
                    raise BusinessRuleViolation(
                        f"Damaged quantity {line['quantity']} for custom item {custom_item.name} "
                        f"exceeds the {custom_item.quantity} piece(s) rented."
                    )
                damaged_custom.add(line['custom_item_id'])

        for vid, qty in damaged_units.items():
            if qty > held[vid]:
                raise BusinessRuleViolation(
                    f"Damaged quantity {qty} for variation {vid} exceeds the {held[vid]} unit(s) rented."
                )

        variations = ItemVariation.objects.select_related('item').in_bulk(list(damaged_units))
        for line in data['damaged_items']:
            if line['variation_id']:
                variation = variations[line['variation_id']]
                DamagedItem.objects.create(
                    variation=variation,
                    item_name=variation.item.name,
                    variation_label=variation.label,
                    image_url=variation.image_url,
                    rental=rental,
                    rental_reference=rental.id,
                    quantity=line['quantity'],
                    damage_reason=line['damage_reason'],
                    damage_notes=line['damage_notes'],
                )
            else:
                custom_item = custom_items[line['custom_item_id']]
                DamagedItem.objects.create(
                    custom_item=custom_item,
                    item_name=custom_item.name,
                    variation_label=f"Custom ({custom_item.outfit_type or custom_item.outfit_category})",
                    image_url=custom_item.reference_images[0] if custom_item.reference_images else '',
                    rental=rental,
                    rental_reference=rental.id,
                    quantity=line['quantity'],
                    damage_reason=line['damage_reason'],
                    damage_notes=line['damage_notes'],
                )

        restored = restore_rental_stock(rental, damaged=damaged_units)

        to_convert = [
            item.id for item in custom_items.values()
            if item.is_rent_back and item.id not in damaged_custom
        ]
        CustomTailoringItem.objects.filter(id__in=to_convert).update(pending_inventory_conversion=True)

        if 'deposit_reimbursed' in data:
            deposit = rental_financials(rental)['deposit_amount']
            if data['deposit_reimbursed'] > deposit:
                raise BusinessRuleViolation('Reimbursement cannot exceed the paid deposit.')
            rental.deposit_reimbursed = data['deposit_reimbursed']

        rental.status = 'Completed'
        rental.save()

        create_audit_log(
            request=request,
            action='return',
            model_name='Rental',
            object_id=rental.id,
            object_name=rental.customer_name,
            object_reference=rental.id,
            changes={
                'stock_released': describe(restored),
                'damaged': describe(damaged_units),
                'damaged_custom_items': sorted(damaged_custom),
                'pending_conversion': to_convert,
            }
        )
        if data['damaged_items']:
            create_audit_log(
                request=request,
                action='damage_report',
                model_name='DamagedItem',
                object_id=rental.id,
                object_reference=rental.id,
                changes={'lines': len(data['damaged_items'])}
            )

    return rental_response(rental.id)


def _pending_custom_item(rental_id, custom_item_id):
    return get_object_or_404(
        CustomTailoringItem.objects.select_for_update(),
        pk=custom_item_id,
        rental_id=rental_id,
        pending_inventory_conversion=True,
    )


@api_view(['DELETE'])
@permission_classes([ManageRentals])
def rental_dismiss_conversion(request, pk, custom_item_id):
    """Drop a rent-back piece from the conversion queue without adding it to inventory"""
    with transaction.atomic():
        custom_item = _pending_custom_item(pk, custom_item_id)
        custom_item.pending_inventory_conversion = False
        custom_item.save(update_fields=['pending_inventory_conversion', 'updated_at'])
    return rental_response(pk)


@api_view(['POST'])
@permission_classes([ManageRentals, role_permission('manage_inventory')])
def rental_convert_custom_item(request, pk, custom_item_id):
    """Add a returned rent-back piece to inventory as a variation of a new or existing item"""
    serializer = InventoryConversionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        custom_item = _pending_custom_item(pk, custom_item_id)
        quantity = data.get('quantity') or custom_item.quantity

        item = Item.objects.filter(name__iexact=custom_item.name).first()
        if item is None:
            item = Item.objects.create(
                name=custom_item.name,
                price=data.get('price', custom_item.price),
                category=data['category'] or custom_item.outfit_category or 'Custom',
                description=custom_item.design_specifications,
                age_group=data['age_group'],
                gender=data['gender'],
            )

        variation, created = ItemVariation.objects.get_or_create(
            item=item,
            color_name=data['color_name'],
            size=data['size'],
            defaults={
                'color_hex': data['color_hex'],
                'quantity': quantity,
                'image_url': data['image_url'] or (custom_item.reference_images[0] if custom_item.reference_images else ''),
            },
        )
        if not created:
            ItemVariation.objects.filter(pk=variation.pk).update(quantity=F('quantity') + quantity)

        custom_item.pending_inventory_conversion = False
        custom_item.save(update_fields=['pending_inventory_conversion', 'updated_at'])

        create_audit_log(
            request=request,
            action='convert',
            model_name='CustomTailoringItem',
            object_id=custom_item.id,
            object_name=custom_item.name,
            object_reference=pk,
            changes={'item_id': item.id, 'variation_id': variation.id, 'quantity': quantity}
        )

    item = Item.objects.prefetch_related('variations').get(pk=item.pk)
    return Response({
        'item': ItemSerializer(item).data,
        'rental': RentalSerializer(_rental_queryset().get(pk=pk)).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([ManageRentals])
def rental_cancel(request, pk):
    reason = request.data.get('reason')
    if not reason or not isinstance(reason, str) or not reason.strip():
        return Response({'error': 'A cancellation reason is required.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        rental = _locked_rental(pk)
        _require_editable(rental, 'cancel')
        restored = restore_rental_stock(rental)
        original_status = rental.status
        rental.status = 'Cancelled'
        rental.cancellation_reason = reason.strip()
        rental.save(update_fields=['status', 'cancellation_reason', 'updated_at'])

        create_audit_log(
            request=request,
            action='cancel',
            model_name='Rental',
            object_id=rental.id,
            object_name=rental.customer_name,
            object_reference=rental.id,
            changes={
                'status': {'old': original_status, 'new': 'Cancelled'},
                'reason': rental.cancellation_reason,
                'stock_released': describe(restored),
            }
        )

    return rental_response(rental.id)
