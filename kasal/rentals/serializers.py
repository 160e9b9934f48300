from decimal import Decimal

from rest_framework import serializers

from .financials import rental_financials
from .models import Rental, RentalItem, RentalPackage, CustomTailoringItem, PackageFulfillment, Payment


class RentalItemSerializer(serializers.ModelSerializer):
    variation_label = serializers.CharField(read_only=True)

    class Meta:
        model = RentalItem
        fields = ['id', 'item', 'variation', 'name', 'color_name', 'color_hex', 'size', 'variation_label',
                  'price', 'quantity', 'image_url', 'notes']


class PackageFulfillmentSerializer(serializers.ModelSerializer):
    custom_item_reference = serializers.CharField(source='custom_item.reference', read_only=True, allow_null=True)
    is_assigned = serializers.BooleanField(read_only=True)

    class Meta:
        model = PackageFulfillment
        fields = ['id', 'role', 'wearer_name', 'is_custom', 'item', 'variation', 'assigned_name',
                  'variation_label', 'image_url', 'custom_item', 'custom_item_reference', 'is_assigned']


class RentalPackageSerializer(serializers.ModelSerializer):
    fulfillments = PackageFulfillmentSerializer(many=True, read_only=True)
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = RentalPackage
        fields = ['id', 'package', 'name', 'display_name', 'motif_name', 'motif_hex', 'price', 'quantity',
                  'image_url', 'notes', 'fulfillments']


class CustomTailoringItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomTailoringItem
        fields = ['id', 'reference', 'name', 'price', 'quantity', 'notes', 'outfit_category', 'outfit_type',
                  'tailoring_type', 'measurements', 'materials', 'design_specifications', 'reference_images',
                  'pending_inventory_conversion', 'source_appointment', 'created_at', 'updated_at']
        read_only_fields = ['reference', 'pending_inventory_conversion', 'source_appointment', 'created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Name is required.')
        return value.strip()


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ['id', 'amount', 'method', 'paid_at', 'reference_number', 'receipt_image_url', 'rental', 'reservation']
        read_only_fields = ['rental', 'reservation']


class RentalSerializer(serializers.ModelSerializer):
    customer_info = serializers.SerializerMethodField()
    items = RentalItemSerializer(many=True, read_only=True)
    packages = RentalPackageSerializer(many=True, read_only=True)
    custom_items = CustomTailoringItemSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    financials = serializers.SerializerMethodField()
    pending_inventory_conversion = serializers.SerializerMethodField()
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, allow_null=True)

    class Meta:
        model = Rental
        fields = ['id', 'customer_info', 'rental_start_date', 'rental_end_date', 'status', 'items', 'packages',
                  'custom_items', 'payments', 'financials', 'pending_inventory_conversion', 'cancellation_reason',
                  'return_reminder_sent', 'source_reservation', 'created_by', 'created_by_username',
                  'created_at', 'updated_at']

    def get_customer_info(self, obj):
        return obj.customer_info

    def get_financials(self, obj):
        return rental_financials(obj)

    def get_pending_inventory_conversion(self, obj):
        return [item.id for item in obj.custom_items.all() if item.pending_inventory_conversion]


# Input payloads

class AddressInputSerializer(serializers.Serializer):
    province = serializers.CharField(required=False, allow_blank=True, default='')
    city = serializers.CharField(required=False, allow_blank=True, default='')
    barangay = serializers.CharField(required=False, allow_blank=True, default='')
    street = serializers.CharField(required=False, allow_blank=True, default='')


class CustomerInfoInputSerializer(serializers.Serializer):
    name = serializers.CharField()
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    phone_number = serializers.CharField()
    address = AddressInputSerializer(required=False)


class CustomerUpdateSerializer(CustomerInfoInputSerializer):
    """Customer edits must carry a full address"""
    address = AddressInputSerializer()


class SingleItemInputSerializer(serializers.Serializer):
    variation_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class FulfillmentInputSerializer(serializers.Serializer):
    role = serializers.CharField()
    wearer_name = serializers.CharField(required=False, allow_blank=True, default='')
    is_custom = serializers.BooleanField(default=False)
    variation_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    custom_item_reference = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['is_custom'] and attrs.get('variation_id'):
            raise serializers.ValidationError('A custom role cannot be assigned an inventory item.')
        return attrs


class PackageRentInputSerializer(serializers.Serializer):
    package_id = serializers.IntegerField()
    motif_hex = serializers.CharField(required=False, allow_blank=True, default='')
    motif_name = serializers.CharField(required=False, allow_blank=True, default='Manual')
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    fulfillment = FulfillmentInputSerializer(many=True, required=False, default=list)


class CustomItemInputSerializer(serializers.Serializer):
    reference = serializers.CharField(required=False, allow_blank=True, default='')
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'))
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    outfit_category = serializers.CharField(required=False, allow_blank=True, default='')
    outfit_type = serializers.CharField(required=False, allow_blank=True, default='')
    tailoring_type = serializers.ChoiceField(choices=CustomTailoringItem.TAILORING_TYPE_CHOICES,
                                             default=CustomTailoringItem.PURCHASE)
    measurements = serializers.DictField(required=False, default=dict)
    materials = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    design_specifications = serializers.CharField(required=False, allow_blank=True, default='')
    reference_images = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, default='Cash')
    reference_number = serializers.CharField(required=False, allow_blank=True, default='')
    receipt_image_url = serializers.CharField(required=False, allow_blank=True, default='')


class RentalLinesInputSerializer(serializers.Serializer):
    single_items = SingleItemInputSerializer(many=True, required=False, default=list)
    package_rents = PackageRentInputSerializer(many=True, required=False, default=list)
    custom_items = CustomItemInputSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        if not (attrs['single_items'] or attrs['package_rents'] or attrs['custom_items']):
            raise serializers.ValidationError('Request must include at least one rental item.')

        references = [line['reference'] for line in attrs['custom_items'] if line['reference']]
        if len(references) != len(set(references)):
            raise serializers.ValidationError('Custom item references must be unique.')
        return attrs


class RentalCreateSerializer(RentalLinesInputSerializer):
    customer_info = CustomerInfoInputSerializer()
    rental_start_date = serializers.DateField(required=False, allow_null=True, default=None)
    rental_end_date = serializers.DateField(required=False, allow_null=True, default=None)
    shop_discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00'))
    deposit_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00'))
    payment = PaymentInputSerializer(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        has_rent_back = any(line['tailoring_type'] == CustomTailoringItem.RENT_BACK for line in attrs['custom_items'])
        if has_rent_back and not attrs['rental_start_date']:
            raise serializers.ValidationError('A rental start date is required for rent-back items.')
        if attrs['rental_start_date'] and attrs['rental_end_date'] and attrs['rental_end_date'] < attrs['rental_start_date']:
            raise serializers.ValidationError('Rental end date cannot be before the start date.')
        return attrs


class RentalProcessSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Rental.STATUS_CHOICES, required=False)
    shop_discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), required=False)
    deposit_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), required=False)
    deposit_reimbursed = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), required=False)
    payment = PaymentInputSerializer(required=False, allow_null=True)


class RentalItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    variation_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PackageUpdateSerializer(serializers.Serializer):
    fulfillment = FulfillmentInputSerializer(many=True)
    custom_items = CustomItemInputSerializer(many=True, required=False, default=list)
    custom_item_references_to_delete = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    notes = serializers.CharField(required=False, allow_blank=True)


class DamagedLineInputSerializer(serializers.Serializer):
    variation_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    custom_item_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=1, default=1)
    damage_reason = serializers.CharField()
    damage_notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if bool(attrs['variation_id']) == bool(attrs['custom_item_id']):
            raise serializers.ValidationError('Each damaged line needs exactly one of variation_id or custom_item_id.')
        return attrs


class ProcessReturnSerializer(serializers.Serializer):
    damaged_items = DamagedLineInputSerializer(many=True, required=False, default=list)
    deposit_reimbursed = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), required=False)


class InventoryConversionSerializer(serializers.Serializer):
    category = serializers.CharField(required=False, allow_blank=True, default='')
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'), required=False)
    color_name = serializers.CharField()
    color_hex = serializers.CharField(required=False, allow_blank=True, default='')
    size = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, required=False)
    age_group = serializers.ChoiceField(choices=['Adult', 'Kids'], default='Adult')
    gender = serializers.ChoiceField(choices=['Male', 'Female', 'Unisex'], default='Unisex')
    image_url = serializers.CharField(required=False, allow_blank=True, default='')
