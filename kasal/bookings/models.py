import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from kasal.core.models import CustomerInfo
from kasal.core.utils import generate_reference


def generate_item_reservation_reference():
    return f"item_{uuid.uuid4().hex[:8]}"


def generate_package_reservation_reference():
    return f"pkg_{uuid.uuid4().hex[:8]}"


TIME_BLOCK_CHOICES = [
    ('morning', 'Morning'),
    ('afternoon', 'Afternoon'),
]


class Reservation(CustomerInfo):
    """A customer's hold on items/packages for an event date, placed from the storefront"""
    STATUS_CHOICES = [
        ('Pending', 'Pending'),
        ('Confirmed', 'Confirmed'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
    ]
    ACTIVE_STATUSES = ('Pending', 'Confirmed')
    CLOSED_STATUSES = ('Completed', 'Cancelled')

    id = models.CharField(max_length=20, primary_key=True, editable=False)
    reserve_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Pending')
    shop_discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    required_deposit = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    package_appointment_date = models.DateField(null=True, blank=True)
    package_appointment_block = models.CharField(max_length=20, choices=TIME_BLOCK_CHOICES, blank=True)
    notes = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.id

    def save(self, *args, **kwargs):
        if not self.id:
            self.id = generate_reference('RES-', Reservation)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'reservations'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'reserve_date'], name='reservation_status_date_idx'),
        ]


class ItemReservation(models.Model):
    reservation = models.ForeignKey(Reservation, on_delete=models.CASCADE, related_name='item_reservations')
    reference = models.CharField(max_length=20, default=generate_item_reservation_reference)
    item = models.ForeignKey('catalog.Item', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    variation = models.ForeignKey('catalog.ItemVariation', on_delete=models.SET_NULL, null=True, blank=True, related_name='item_reservations')
    item_name = models.CharField(max_length=255)
    color_name = models.CharField(max_length=100)
    color_hex = models.CharField(max_length=20, blank=True)
    size = models.CharField(max_length=20)
    image_url = models.CharField(max_length=500, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2)

    @property
    def variation_label(self):
        return f"{self.color_name}, {self.size}"

    class Meta:
        db_table = 'reservation_items'
        ordering = ['id']


class PackageReservation(models.Model):
    reservation = models.ForeignKey(Reservation, on_delete=models.CASCADE, related_name='package_reservations')
    reference = models.CharField(max_length=20, default=generate_package_reservation_reference)
    package = models.ForeignKey('catalog.Package', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    package_name = models.CharField(max_length=255)
    motif_hex = models.CharField(max_length=20, blank=True)
    motif_name = models.CharField(max_length=100, default='Manual')
    image_url = models.CharField(max_length=500, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    @property
    def quantity(self):
        return 1

    class Meta:
        db_table = 'reservation_packages'
        ordering = ['id']


class Appointment(CustomerInfo):
    """Tailoring/fitting appointment in a morning or afternoon block"""
    STATUS_CHOICES = [
        ('Pending', 'Pending'),
        ('Confirmed', 'Confirmed'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
    ]
    BOOKED_STATUSES = ('Pending', 'Confirmed', 'Completed')

    id = models.CharField(max_length=20, primary_key=True, editable=False)
    appointment_date = models.DateField()
    time_block = models.CharField(max_length=20, choices=TIME_BLOCK_CHOICES, default='morning')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Pending')
    notes = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)
    source_reservation = models.ForeignKey(Reservation, on_delete=models.SET_NULL, null=True, blank=True, related_name='appointments')
    rental = models.ForeignKey('rentals.Rental', on_delete=models.SET_NULL, null=True, blank=True, related_name='appointments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.id

    def save(self, *args, **kwargs):
        if not self.id:
            self.id = generate_reference('APT-', Appointment)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'appointments'
        ordering = ['-appointment_date', 'time_block']
        indexes = [
            models.Index(fields=['appointment_date', 'status'], name='appointment_date_status_idx'),
        ]


class FulfillmentPreview(models.Model):
    """Planned wearer assignment for a reserved package"""
    package_reservation = models.ForeignKey(PackageReservation, on_delete=models.CASCADE, related_name='fulfillment_preview')
    role = models.CharField(max_length=255)
    wearer_name = models.CharField(max_length=255, blank=True)
    is_custom = models.BooleanField(default=False)
    item = models.ForeignKey('catalog.Item', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    variation = models.ForeignKey('catalog.ItemVariation', on_delete=models.SET_NULL, null=True, blank=True, related_name='fulfillment_previews')
    variation_label = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    linked_appointment = models.ForeignKey(Appointment, on_delete=models.SET_NULL, null=True, blank=True, related_name='fulfillment_rows')

    class Meta:
        db_table = 'reservation_fulfillment_preview'
        ordering = ['id']


class Unavailability(models.Model):
    """A date on which the shop takes no appointments"""
    date = models.DateField(unique=True)
    reason = models.CharField(max_length=255)
    is_full_day = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.date}: {self.reason}"

    class Meta:
        db_table = 'unavailabilities'
        ordering = ['date']
        verbose_name_plural = 'unavailabilities'
