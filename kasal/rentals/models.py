import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from kasal.core.models import CustomerInfo
from kasal.core.utils import generate_reference


def generate_custom_item_reference():
    return f"CUST-{uuid.uuid4().hex[:8].upper()}"


class Rental(CustomerInfo):
    """A rental order: single items, packages and custom-tailored pieces for one customer"""
    STATUS_CHOICES = [
        ('Pending', 'Pending'),
        ('To Pickup', 'To Pickup'),
        ('To Return', 'To Return'),
        ('Returned', 'Returned'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
    ]
    # Statuses in which the rental holds decremented stock
    ACTIVE_STATUSES = ('Pending', 'To Pickup', 'To Return')
    # Statuses in which lines, dates and customer details may still change
    EDITABLE_STATUSES = ('Pending', 'To Pickup')
    CLOSED_STATUSES = ('Returned', 'Completed', 'Cancelled')

    id = models.CharField(max_length=20, primary_key=True, editable=False)
    rental_start_date = models.DateField()
    rental_end_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Pending')
    shop_discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    deposit_reimbursed = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    cancellation_reason = models.TextField(blank=True)
    return_reminder_sent = models.BooleanField(default=False)
    source_reservation = models.OneToOneField('bookings.Reservation', on_delete=models.SET_NULL, null=True, blank=True, related_name='rental')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rentals')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.id

    def save(self, *args, **kwargs):
        if not self.id:
            self.id = generate_reference('KSL_', Rental)
        super().save(*args, **kwargs)

    @property
    def holds_stock(self):
        return self.status in self.ACTIVE_STATUSES

    @property
    def is_editable(self):
        return self.status in self.EDITABLE_STATUSES

    class Meta:
        db_table = 'rentals'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'rental_start_date', 'rental_end_date'], name='rental_status_dates_idx'),
            models.Index(fields=['customer_phone'], name='rental_phone_idx'),
        ]


class RentalItem(models.Model):
    """A single item variation on a rental"""
    rental = models.ForeignKey(Rental, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey('catalog.Item', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    variation = models.ForeignKey('catalog.ItemVariation', on_delete=models.SET_NULL, null=True, blank=True, related_name='rental_items')
    name = models.CharField(max_length=255)
    color_name = models.CharField(max_length=100)
    color_hex = models.CharField(max_length=20, blank=True)
    size = models.CharField(max_length=20)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    image_url = models.CharField(max_length=500, blank=True)
    notes = models.TextField(blank=True)

    @property
    def variation_label(self):
        return f"{self.color_name}, {self.size}"

    class Meta:
        db_table = 'rental_items'
        ordering = ['id']


class RentalPackage(models.Model):
    rental = models.ForeignKey(Rental, on_delete=models.CASCADE, related_name='packages')
    package = models.ForeignKey('catalog.Package', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    name = models.CharField(max_length=255)
    motif_name = models.CharField(max_length=100, default='Manual')
    motif_hex = models.CharField(max_length=20, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    image_url = models.CharField(max_length=500, blank=True)
    notes = models.TextField(blank=True)

    @property
    def display_name(self):
        return f"{self.name} ({self.motif_name})" if self.motif_name else self.name

    class Meta:
        db_table = 'rental_packages'
        ordering = ['id']


class CustomTailoringItem(models.Model):
    """A made-to-measure piece, either sold outright or rented back to the shop's stock"""
    PURCHASE = 'Tailored for Purchase'
    RENT_BACK = 'Tailored for Rent-Back'
    TAILORING_TYPE_CHOICES = [
        (PURCHASE, PURCHASE),
        (RENT_BACK, RENT_BACK),
    ]

    rental = models.ForeignKey(Rental, on_delete=models.CASCADE, related_name='custom_items')
    reference = models.CharField(max_length=40, default=generate_custom_item_reference)
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True)
    outfit_category = models.CharField(max_length=100, blank=True)
    outfit_type = models.CharField(max_length=100, blank=True)
    tailoring_type = models.CharField(max_length=40, choices=TAILORING_TYPE_CHOICES, default=PURCHASE)
    measurements = models.JSONField(default=dict, blank=True)
    materials = models.JSONField(default=list, blank=True)
    design_specifications = models.TextField(blank=True)
    reference_images = models.JSONField(default=list, blank=True)
    pending_inventory_conversion = models.BooleanField(default=False)
    source_appointment = models.ForeignKey('bookings.Appointment', on_delete=models.SET_NULL, null=True, blank=True, related_name='custom_items')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.reference})"

    @property
    def is_rent_back(self):
        return self.tailoring_type == self.RENT_BACK

    class Meta:
        db_table = 'rental_custom_items'
        ordering = ['id']
        unique_together = [['rental', 'reference']]


class PackageFulfillment(models.Model):
    """Who wears what for one role of a rented package"""
    rental_package = models.ForeignKey(RentalPackage, on_delete=models.CASCADE, related_name='fulfillments')
    role = models.CharField(max_length=255)
    wearer_name = models.CharField(max_length=255, blank=True)
    is_custom = models.BooleanField(default=False)
    item = models.ForeignKey('catalog.Item', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    variation = models.ForeignKey('catalog.ItemVariation', on_delete=models.SET_NULL, null=True, blank=True, related_name='package_fulfillments')
    assigned_name = models.CharField(max_length=255, blank=True)
    variation_label = models.CharField(max_length=255, blank=True)
    image_url = models.CharField(max_length=500, blank=True)
    custom_item = models.ForeignKey(CustomTailoringItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='fulfillments')

    @property
    def is_assigned(self):
        if self.is_custom:
            return self.custom_item_id is not None
        return self.variation_id is not None

    class Meta:
        db_table = 'rental_package_fulfillments'
        ordering = ['id']


class Payment(models.Model):
    """Money received against a rental or a reservation"""
    METHOD_CHOICES = [
        ('Cash', 'Cash'),
        ('GCash', 'GCash'),
        ('Bank Transfer', 'Bank Transfer'),
    ]

    rental = models.ForeignKey(Rental, on_delete=models.CASCADE, null=True, blank=True, related_name='payments')
    reservation = models.ForeignKey('bookings.Reservation', on_delete=models.CASCADE, null=True, blank=True, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='Cash')
    paid_at = models.DateTimeField(default=timezone.now)
    reference_number = models.CharField(max_length=100, blank=True)
    receipt_image_url = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.method} {self.amount}"

    class Meta:
        db_table = 'payments'
        ordering = ['paid_at', 'id']
