from decimal import Decimal

from rest_framework import serializers

from kasal.rentals.financials import reservation_financials
from kasal.rentals.serializers import (
    CustomerInfoInputSerializer, PaymentInputSerializer, PaymentSerializer, CustomItemInputSerializer
)
from .models import (
    Reservation, ItemReservation, PackageReservation, FulfillmentPreview, Appointment, Unavailability,
    TIME_BLOCK_CHOICES
)


class ItemReservationSerializer(serializers.ModelSerializer):
    variation_label = serializers.CharField(read_only=True)

    class Meta:
        model = ItemReservation
        fields = ['id', 'reference', 'item', 'variation', 'item_name', 'color_name', 'color_hex', 'size',
                  'variation_label', 'image_url', 'quantity', 'price']


class FulfillmentPreviewSerializer(serializers.ModelSerializer):
    assigned_item_name = serializers.CharField(source='item.name', read_only=True, allow_null=True)

    class Meta:
        model = FulfillmentPreview
        fields = ['id', 'role', 'wearer_name', 'is_custom', 'item', 'assigned_item_name', 'variation',
                  'variation_label', 'notes', 'linked_appointment']


class PackageReservationSerializer(serializers.ModelSerializer):
    fulfillment_preview = FulfillmentPreviewSerializer(many=True, read_only=True)

    class Meta:
        model = PackageReservation
        fields = ['id', 'reference', 'package', 'package_name', 'motif_hex', 'motif_name', 'image_url', 'price',
                  'fulfillment_preview']


class ReservationSerializer(serializers.ModelSerializer):
    customer_info = serializers.SerializerMethodField()
    item_reservations = ItemReservationSerializer(many=True, read_only=True)
    package_reservations = PackageReservationSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    financials = serializers.SerializerMethodField()
    rental_id = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = ['id', 'customer_info', 'reserve_date', 'status', 'item_reservations', 'package_reservations',
                  'payments', 'financials', 'shop_discount', 'deposit_amount', 'required_deposit',
                  'package_appointment_date', 'package_appointment_block', 'notes', 'cancellation_reason',
                  'rental_id', 'created_at', 'updated_at']

    def get_customer_info(self, obj):
        return obj.customer_info

    def get_financials(self, obj):
        return reservation_financials(obj)

    def get_rental_id(self, obj):
        rental = getattr(obj, 'rental', None)
        return rental.id if rental else None


class ReservationItemInputSerializer(serializers.Serializer):
    variation_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class FulfillmentPreviewInputSerializer(serializers.Serializer):
    role = serializers.CharField()
    wearer_name = serializers.CharField(required=False, allow_blank=True, default='')
    is_custom = serializers.BooleanField(default=False)
    variation_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['is_custom'] and attrs['variation_id']:
            raise serializers.ValidationError('A custom role cannot be assigned an inventory item.')
        return attrs


class PackageReservationInputSerializer(serializers.Serializer):
    package_id = serializers.IntegerField()
    motif_hex = serializers.CharField(required=False, allow_blank=True, default='')
    motif_name = serializers.CharField(required=False, allow_blank=True, default='Manual')
    fulfillment_preview = FulfillmentPreviewInputSerializer(many=True, required=False, default=list)


class ReservationCreateSerializer(serializers.Serializer):
    customer_info = CustomerInfoInputSerializer()
    reserve_date = serializers.DateField()
    item_reservations = ReservationItemInputSerializer(many=True, required=False, default=list)
    package_reservations = PackageReservationInputSerializer(many=True, required=False, default=list)
    payment = PaymentInputSerializer(required=False, allow_null=True, default=None)
    package_appointment_date = serializers.DateField(required=False, allow_null=True, default=None)
    package_appointment_block = serializers.ChoiceField(choices=TIME_BLOCK_CHOICES, required=False, default='morning')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if not (attrs['item_reservations'] or attrs['package_reservations']):
            raise serializers.ValidationError('A reservation must contain at least one item or package.')
        return attrs


class ReservationUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Reservation
        fields = ['notes', 'package_appointment_date', 'package_appointment_block', 'shop_discount', 'deposit_amount']
        extra_kwargs = {
            'shop_discount': {'min_value': Decimal('0.00')},
            'deposit_amount': {'min_value': Decimal('0.00')},
        }


class AppointmentSerializer(serializers.ModelSerializer):
    customer_info = serializers.SerializerMethodField()
    custom_items = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = ['id', 'customer_info', 'appointment_date', 'time_block', 'status', 'notes', 'cancellation_reason',
                  'source_reservation', 'rental', 'custom_items', 'created_at', 'updated_at']

    def get_customer_info(self, obj):
        return obj.customer_info

    def get_custom_items(self, obj):
        return [item.reference for item in obj.custom_items.all()]


class AppointmentCreateSerializer(serializers.Serializer):
    customer_info = CustomerInfoInputSerializer()
    appointment_date = serializers.DateField()
    time_block = serializers.ChoiceField(choices=TIME_BLOCK_CHOICES, default='morning')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class AppointmentUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Appointment
        fields = ['appointment_date', 'time_block', 'status', 'notes']

    def validate_status(self, value):
        if value == 'Cancelled':
            raise serializers.ValidationError('Use the cancel action to cancel an appointment.')
        return value


class AppointmentProcessSerializer(serializers.Serializer):
    custom_item = CustomItemInputSerializer()
    rental_start_date = serializers.DateField(required=False, allow_null=True, default=None)


class UnavailabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Unavailability
        fields = ['id', 'date', 'reason', 'is_full_day', 'created_at']
        read_only_fields = ['created_at']

    def validate_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError('A reason is required.')
        return value.strip()
