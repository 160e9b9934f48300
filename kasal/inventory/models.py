from django.core.validators import MinValueValidator
from django.db import models


class DamagedItem(models.Model):
    """Units reported damaged on return; held out of stock until repaired"""
    STATUS_CHOICES = [
        ('Awaiting Repair', 'Awaiting Repair'),
        ('Under Repair', 'Under Repair'),
        ('Repaired', 'Repaired'),
        ('Disposed', 'Disposed'),
    ]
    TERMINAL_STATUSES = ('Repaired', 'Disposed')

    variation = models.ForeignKey('catalog.ItemVariation', on_delete=models.SET_NULL, null=True, blank=True, related_name='damage_reports')
    custom_item = models.ForeignKey('rentals.CustomTailoringItem', on_delete=models.SET_NULL, null=True, blank=True, related_name='damage_reports')
    item_name = models.CharField(max_length=255)
    variation_label = models.CharField(max_length=255, blank=True)
    image_url = models.CharField(max_length=500, blank=True)
    rental = models.ForeignKey('rentals.Rental', on_delete=models.SET_NULL, null=True, blank=True, related_name='damaged_items')
    rental_reference = models.CharField(max_length=20, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    damage_reason = models.CharField(max_length=255)
    damage_notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Awaiting Repair')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_name} ({self.variation_label}) x{self.quantity} - {self.status}"

    @property
    def is_inventory_item(self):
        return self.custom_item_id is None

    class Meta:
        db_table = 'damaged_items'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='damaged_status_idx'),
            models.Index(fields=['rental_reference'], name='damaged_rental_idx'),
        ]
