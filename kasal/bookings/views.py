import logging
from decimal import Decimal, ROUND_HALF_UP

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.core.paginator import Paginator
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.conf import settings

from kasal.core.exceptions import AvailabilityConflict, BusinessRuleViolation
from kasal.core.permissions import role_permission, public_create
from kasal.core.sanitizers import sanitize_payload
from kasal.core.utils import create_audit_log, parse_date
from kasal.inventory.availability import check_availability, rental_window
from kasal.rentals.financials import calculate_financials
from kasal.rentals.models import Rental, PackageFulfillment, Payment
from kasal.rentals.serializers import CustomerUpdateSerializer
from kasal.rentals.services import load_variations, load_packages, upsert_custom_items
from kasal.rentals.views import rental_response
from .models import Reservation, Appointment, Unavailability
from .serializers import (
    ReservationSerializer, ReservationCreateSerializer, ReservationUpdateSerializer,
    AppointmentSerializer, AppointmentCreateSerializer, AppointmentUpdateSerializer, AppointmentProcessSerializer,
    UnavailabilitySerializer
)
from .services import (
    reservation_lines_demand, reservation_demand, appointment_load, ensure_appointment_slot,
    create_reservation_lines, create_linked_appointments
)

logger = logging.getLogger(__name__)

ManageReservations = role_permission('manage_reservations')
ManageAppointments = role_permission('manage_appointments')


def _reservation_queryset():
    return Reservation.objects.prefetch_related(
        'item_reservations', 'package_reservations__fulfillment_preview__item', 'payments'
    ).select_related('rental')


def _reservation_response(reservation_id, status_code=status.HTTP_200_OK):
    return Response(ReservationSerializer(_reservation_queryset().get(pk=reservation_id)).data, status=status_code)


def _appointment_queryset():
    return Appointment.objects.prefetch_related('custom_items')


def _conflict(prefix, availability):
    names = ", ".join(f"{item['name']} ({item['variation']})" for item in availability['conflicting_items'])
    return AvailabilityConflict(availability['conflicting_items'], detail=f"{prefix}: {names}")


def _required_reason(request):
    reason = request.data.get('reason')
    if not reason or not isinstance(reason, str) or not reason.strip():
        return None
    return reason.strip()


# Reservation views
@api_view(['GET', 'POST'])
@permission_classes([public_create('manage_reservations')])
def reservation_list_create(request):
    """
    GET (staff): paginated reservations, newest first.
    POST (public): place a reservation priced from the catalogue.

    A reservation with anything to pay must come with a payment covering at
    least half of its grand total. Custom roles in a package get a pending
    appointment on the package appointment date.
    """
    if request.method == 'GET':
        queryset = _reservation_queryset().order_by('-created_at')
        reservation_status = request.query_params.get('status')
        if reservation_status:
            queryset = queryset.filter(status=reservation_status)

        try:
            page = int(request.query_params.get('page', 1))
            limit = int(request.query_params.get('limit', 10))
        except ValueError:
            return Response({'error': 'page and limit must be integers.'}, status=status.HTTP_400_BAD_REQUEST)
        paginator = Paginator(queryset, max(limit, 1))
        page_obj = paginator.get_page(page)

        return Response({
            'reservations': ReservationSerializer(page_obj, many=True).data,
            'current_page': page_obj.number,
            'total_pages': paginator.num_pages,
        })

    serializer = ReservationCreateSerializer(data=sanitize_payload(request.data))
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if data['reserve_date'] < timezone.localdate():
        return Response({'error': 'Reservation date cannot be in the past.'}, status=status.HTTP_400_BAD_REQUEST)

    variations = load_variations(
        [line['variation_id'] for line in data['item_reservations']]
        + [row['variation_id'] for line in data['package_reservations'] for row in line['fulfillment_preview']]
    )
    packages = load_packages(line['package_id'] for line in data['package_reservations'])
    requested = reservation_lines_demand(data['item_reservations'], data['package_reservations'])

    financials = calculate_financials(
        single_items=[
            {'price': variations[line['variation_id']].item.price, 'quantity': line['quantity']}
            for line in data['item_reservations']
        ],
        packages=[{'price': packages[line['package_id']].price, 'quantity': 1} for line in data['package_reservations']],
    )
    grand_total = financials['grand_total']
    payment = data['payment']
    if grand_total > 0:
        if not payment:
            return Response({'error': 'Payment details are required for this reservation.'}, status=status.HTTP_400_BAD_REQUEST)
        ratio = settings.KASAL_RENTAL['RESERVATION_MIN_PAYMENT_RATIO']
        minimum = (grand_total * ratio).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if payment['amount'] < minimum:
            return Response(
                {'error': f'Payment is insufficient. A minimum of {int(ratio * 100)}% (₱{minimum}) of the grand total is required.'},
                status=status.HTTP_400_BAD_REQUEST
            )

    has_custom_roles = any(row['is_custom'] for line in data['package_reservations'] for row in line['fulfillment_preview'])

    with transaction.atomic():
        availability = check_availability(requested, data['reserve_date'])
        if not availability['is_available']:
            raise _conflict('One or more selected items are unavailable on this date', availability)
        if has_custom_roles and data['package_appointment_date']:
            ensure_appointment_slot(data['package_appointment_date'], data['package_appointment_block'])

        reservation = Reservation(
            reserve_date=data['reserve_date'],
            required_deposit=financials['required_deposit'],
            deposit_amount=financials['required_deposit'],
            package_appointment_date=data['package_appointment_date'],
            package_appointment_block=data['package_appointment_block'] if data['package_appointment_date'] else '',
            notes=data['notes'],
        )
        reservation.set_customer_info(data['customer_info'])
        reservation.save()

        previews = create_reservation_lines(
            reservation, data['item_reservations'], data['package_reservations'], variations, packages
        )
        appointments = create_linked_appointments(reservation, previews)
        if payment:
            Payment.objects.create(reservation=reservation, **payment)

        create_audit_log(
            request=request,
            action='create',
            model_name='Reservation',
            object_id=reservation.id,
            object_name=reservation.customer_name,
            object_reference=reservation.id,
            changes={
                'reserve_date': str(reservation.reserve_date),
                'grand_total': str(grand_total),
                'appointments': [appointment.id for appointment in appointments],
            }
        )

    logger.info(f"Reservation {reservation.id} placed for {reservation.reserve_date} ({len(appointments)} appointment(s))")
    return _reservation_response(reservation.id, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([ManageReservations])
def reservation_detail(request, pk):
    """Retrieve a reservation or update its notes, discount, deposit and appointment fields"""
    reservation = get_object_or_404(_reservation_queryset(), pk=pk)
    if request.method == 'GET':
        return Response(ReservationSerializer(reservation).data)

    serializer = ReservationUpdateSerializer(reservation, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    create_audit_log(
        request=request,
        action='update',
        model_name='Reservation',
        object_id=reservation.id,
        object_reference=reservation.id,
        changes={key: str(value) for key, value in serializer.validated_data.items()}
    )
    return _reservation_response(reservation.id)


@api_view(['PUT'])
@permission_classes([ManageReservations])
def reservation_customer(request, pk):
    reservation = get_object_or_404(Reservation, pk=pk)
    serializer = CustomerUpdateSerializer(data=sanitize_payload(request.data))
    if not serializer.is_valid():
        return Response({'error': 'Incomplete customer information provided.', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    old = reservation.customer_info
    reservation.set_customer_info(serializer.validated_data)
    reservation.save()
    create_audit_log(
        request=request,
        action='update',
        model_name='Reservation',
        object_id=reservation.id,
        object_reference=reservation.id,
        changes={'customer_info': {'old': old, 'new': reservation.customer_info}}
    )
    return _reservation_response(reservation.id)


@api_view(['PUT'])
@permission_classes([ManageReservations])
def reservation_confirm(request, pk):
    with transaction.atomic():
        reservation = get_object_or_404(Reservation.objects.select_for_update(), pk=pk)
        if reservation.status != 'Pending':
            raise BusinessRuleViolation(
                f"Only reservations with a 'Pending' status can be confirmed. Current status: {reservation.status}."
            )
        reservation.status = 'Confirmed'
        reservation.save(update_fields=['status', 'updated_at'])
        create_audit_log(
            request=request,
            action='status_change',
            model_name='Reservation',
            object_id=reservation.id,
            object_reference=reservation.id,
            changes={'status': {'old': 'Pending', 'new': 'Confirmed'}}
        )
    return _reservation_response(reservation.id)


@api_view(['PUT'])
@permission_classes([ManageReservations])
def reservation_cancel(request, pk):
    """Cancel a reservation; reservations hold no shelf stock, so nothing is restored"""
    reason = _required_reason(request)
    if reason is None:
        return Response({'error': 'A cancellation reason is required.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        reservation = get_object_or_404(Reservation.objects.select_for_update(), pk=pk)
        if reservation.status in Reservation.CLOSED_STATUSES:
            raise BusinessRuleViolation(f'This reservation cannot be cancelled as it is already {reservation.status}.')

        old_status = reservation.status
        reservation.status = 'Cancelled'
        reservation.cancellation_reason = reason
        reservation.save(update_fields=['status', 'cancellation_reason', 'updated_at'])
        create_audit_log(
            request=request,
            action='cancel',
            model_name='Reservation',
            object_id=reservation.id,
            object_name=reservation.customer_name,
            object_reference=reservation.id,
            changes={'status': {'old': old_status, 'new': 'Cancelled'}, 'reason': reason}
        )
    return _reservation_response(reservation.id)


@api_view(['PUT'])
@permission_classes([ManageReservations])
def reservation_reschedule(request, pk):
    try:
        new_date = parse_date(request.data.get('new_date'), 'new_date')
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        reservation = get_object_or_404(Reservation.objects.select_for_update(), pk=pk)
        if reservation.status not in Reservation.ACTIVE_STATUSES:
            raise BusinessRuleViolation(f'Cannot reschedule a reservation with status "{reservation.status}".')

        availability = check_availability(reservation_demand(reservation), new_date, exclude_reservation_id=reservation.id)
        if not availability['is_available']:
            raise _conflict('Cannot reschedule', availability)

        old_date = reservation.reserve_date
        reservation.reserve_date = new_date
        reservation.save(update_fields=['reserve_date', 'updated_at'])
        create_audit_log(
            request=request,
            action='reschedule',
            model_name='Reservation',
            object_id=reservation.id,
            object_reference=reservation.id,
            changes={'old': str(old_date), 'new': str(new_date)}
        )
    return _reservation_response(reservation.id)


@api_view(['GET'])
@permission_classes([ManageReservations])
def reservation_check_availability(request, pk):
    """Dry run of reschedule for ?date="""
    reservation = get_object_or_404(_reservation_queryset(), pk=pk)
    try:
        new_date = parse_date(request.query_params.get('date'), 'date')
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(check_availability(reservation_demand(reservation), new_date, exclude_reservation_id=reservation.id))


# Appointment views
@api_view(['GET', 'POST'])
@permission_classes([public_create('manage_appointments')])
def appointment_list_create(request):
    if request.method == 'GET':
        queryset = _appointment_queryset().order_by('-appointment_date', 'time_block')
        appointment_status = request.query_params.get('status')
        if appointment_status:
            queryset = queryset.filter(status=appointment_status)
        return Response(AppointmentSerializer(queryset, many=True).data)

    serializer = AppointmentCreateSerializer(data=sanitize_payload(request.data))
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if data['appointment_date'] < timezone.localdate():
        return Response({'error': 'Appointment date cannot be in the past.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        ensure_appointment_slot(data['appointment_date'], data['time_block'])
        appointment = Appointment(
            appointment_date=data['appointment_date'],
            time_block=data['time_block'],
            notes=data['notes'],
        )
        appointment.set_customer_info(data['customer_info'])
        appointment.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Appointment',
            object_id=appointment.id,
            object_name=appointment.customer_name,
            object_reference=appointment.id,
            changes={'date': str(appointment.appointment_date), 'time_block': appointment.time_block}
        )

    logger.info(f"Appointment {appointment.id} booked for {appointment.appointment_date} ({appointment.time_block})")
    return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def appointment_booked_slots(request):
    try:
        day = parse_date(request.query_params.get('date'), 'date')
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(appointment_load(day))


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([ManageAppointments])
def appointment_detail(request, pk):
    appointment = get_object_or_404(_appointment_queryset(), pk=pk)
    if request.method == 'GET':
        return Response(AppointmentSerializer(appointment).data)

    serializer = AppointmentUpdateSerializer(appointment, data=sanitize_payload(request.data), partial=True)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    new_date = data.get('appointment_date', appointment.appointment_date)
    new_block = data.get('time_block', appointment.time_block)
    with transaction.atomic():
        if (new_date, new_block) != (appointment.appointment_date, appointment.time_block):
            ensure_appointment_slot(new_date, new_block, exclude_id=appointment.id)
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='Appointment',
            object_id=appointment.id,
            object_reference=appointment.id,
            changes={key: str(value) for key, value in data.items()}
        )
    return Response(AppointmentSerializer(_appointment_queryset().get(pk=appointment.pk)).data)


@api_view(['PUT'])
@permission_classes([ManageAppointments])
def appointment_cancel(request, pk):
    reason = _required_reason(request)
    if reason is None:
        return Response({'error': 'A cancellation reason is required.'}, status=status.HTTP_400_BAD_REQUEST)

    appointment = get_object_or_404(Appointment, pk=pk)
    if appointment.status in ('Completed', 'Cancelled'):
        raise BusinessRuleViolation(f'This appointment cannot be cancelled as it is already {appointment.status}.')

    old_status = appointment.status
    appointment.status = 'Cancelled'
    appointment.cancellation_reason = reason
    appointment.save(update_fields=['status', 'cancellation_reason', 'updated_at'])
    create_audit_log(
        request=request,
        action='cancel',
        model_name='Appointment',
        object_id=appointment.id,
        object_reference=appointment.id,
        changes={'status': {'old': old_status, 'new': 'Cancelled'}, 'reason': reason}
    )
    return Response(AppointmentSerializer(_appointment_queryset().get(pk=appointment.pk)).data)


@api_view(['PUT'])
@permission_classes([ManageAppointments, role_permission('manage_rentals')])
def appointment_process(request, pk):
    """
    Record the tailored piece taken at an appointment.

    The piece goes onto the appointment's rental, or onto a new Pending rental
    for the same customer, and fills the matching custom package role when
    the appointment came from a reservation. The appointment is completed.
    """
    serializer = AppointmentProcessSerializer(data=sanitize_payload(request.data))
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        appointment = get_object_or_404(Appointment.objects.select_for_update(), pk=pk)
        if appointment.status in ('Completed', 'Cancelled'):
            raise BusinessRuleViolation(f'Cannot process an appointment with status "{appointment.status}".')

        rental = appointment.rental
        created = False
        if rental is None:
            start_date = data['rental_start_date'] or timezone.localdate()
            rental = Rental(created_by=request.user)
            rental.rental_start_date, rental.rental_end_date = rental_window(start_date)
            rental.set_customer_info(appointment.customer_info)
            rental.save()
            created = True
        elif not rental.is_editable:
            raise BusinessRuleViolation(f'Cannot add items to a rental with status "{rental.status}".')

        saved = upsert_custom_items(rental, [data['custom_item']], source_appointment=appointment)
        custom_item = next(iter(saved.values()))

        roles = list(appointment.fulfillment_rows.values_list('role', flat=True))
        if roles:
            slot = PackageFulfillment.objects.filter(
                rental_package__rental=rental, is_custom=True, custom_item__isnull=True, role__in=roles
            ).first()
            if slot:
                slot.custom_item = custom_item
                slot.assigned_name = custom_item.name
                slot.save(update_fields=['custom_item', 'assigned_name'])

        appointment.rental = rental
        appointment.status = 'Completed'
        appointment.save(update_fields=['rental', 'status', 'updated_at'])

        create_audit_log(
            request=request,
            action='convert',
            model_name='Appointment',
            object_id=appointment.id,
            object_name=appointment.customer_name,
            object_reference=rental.id,
            changes={'rental': rental.id, 'rental_created': created, 'custom_item': custom_item.reference}
        )

    return rental_response(rental.id, status.HTTP_201_CREATED if created else status.HTTP_200_OK)


# Unavailability views
@api_view(['GET', 'POST'])
@permission_classes([ManageAppointments])
def unavailability_list_create(request):
    """Upcoming closures (today onwards), or add one"""
    if request.method == 'GET':
        queryset = Unavailability.objects.filter(date__gte=timezone.localdate()).order_by('date')
        return Response(UnavailabilitySerializer(queryset, many=True).data)

    serializer = UnavailabilitySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    closure = serializer.save()
    create_audit_log(
        request=request,
        action='create',
        model_name='Unavailability',
        object_id=closure.id,
        object_name=str(closure.date),
        changes={'reason': closure.reason, 'is_full_day': closure.is_full_day}
    )
    return Response(UnavailabilitySerializer(closure).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def unavailability_dates(request):
    """Flat list of closed dates for the storefront date picker"""
    dates = Unavailability.objects.order_by('date').values_list('date', flat=True)
    return Response([str(day) for day in dates])


@api_view(['GET'])
@permission_classes([ManageAppointments])
def unavailability_by_date(request, date):
    try:
        day = parse_date(date)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    closure = Unavailability.objects.filter(date=day).first()
    return Response(UnavailabilitySerializer(closure).data if closure else None)


@api_view(['PUT', 'DELETE'])
@permission_classes([ManageAppointments])
def unavailability_detail(request, pk):
    closure = get_object_or_404(Unavailability, pk=pk)

    if request.method == 'DELETE':
        create_audit_log(
            request=request,
            action='delete',
            model_name='Unavailability',
            object_id=closure.id,
            object_name=str(closure.date),
        )
        closure.delete()
        return Response({'message': 'Unavailability record deleted successfully.'})

    reason = _required_reason(request)
    if reason is None:
        return Response({'error': 'A reason is required for the update.'}, status=status.HTTP_400_BAD_REQUEST)
    closure.reason = reason
    closure.save(update_fields=['reason'])
    return Response(UnavailabilitySerializer(closure).data)


# Public tracking
@api_view(['GET'])
@permission_classes([AllowAny])
def track_request(request, reference):
    """Look up a reservation (RES-) or appointment (APT-) by its public reference"""
    search_id = reference.strip().upper()

    if search_id.startswith('RES-'):
        reservation = _reservation_queryset().filter(pk=search_id).first()
        if reservation:
            return Response({'type': 'reservation', 'data': ReservationSerializer(reservation).data})

    if search_id.startswith('APT-'):
        appointment = _appointment_queryset().filter(pk=search_id).first()
        if appointment:
            return Response({'type': 'appointment', 'data': AppointmentSerializer(appointment).data})

    return Response(
        {'error': 'No request found with the provided ID. Please check the ID and try again.'},
        status=status.HTTP_404_NOT_FOUND
    )
