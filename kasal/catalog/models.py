from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Item(models.Model):
    """A rentable outfit; stock is tracked per colour/size variation"""
    AGE_GROUP_CHOICES = [
        ('Adult', 'Adult'),
        ('Kids', 'Kids'),
    ]
    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Unisex', 'Unisex'),
    ]

    name = models.CharField(max_length=255, unique=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    category = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    features = models.JSONField(default=list, blank=True)
    composition = models.JSONField(default=list, blank=True)
    age_group = models.CharField(max_length=10, choices=AGE_GROUP_CHOICES, default='Adult')
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, default='Unisex')
    heart_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'items'
        ordering = ['name']


class ItemVariation(models.Model):
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='variations')
    color_name = models.CharField(max_length=100)
    color_hex = models.CharField(max_length=20)
    size = models.CharField(max_length=20)
    quantity = models.PositiveIntegerField(default=0)
    image_url = models.CharField(max_length=500, blank=True)

    def __str__(self):
        return f"{self.item.name} ({self.label})"

    @property
    def label(self):
        return f"{self.color_name}, {self.size}"

    class Meta:
        db_table = 'item_variations'
        ordering = ['id']
        unique_together = [['item', 'color_name', 'size']]


class Package(models.Model):
    """A set of outfits priced together, one inclusion per wearer role"""
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    image_urls = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'packages'
        ordering = ['price']


class PackageInclusion(models.Model):
    TYPE_CHOICES = [
        ('Wearable', 'Wearable'),
        ('Accessory', 'Accessory'),
    ]

    package = models.ForeignKey(Package, on_delete=models.CASCADE, related_name='inclusions')
    wearer_num = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    name = models.CharField(max_length=255)
    is_custom = models.BooleanField(default=False)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='Wearable')

    def __str__(self):
        return f"{self.name} x{self.wearer_num}"

    class Meta:
        db_table = 'package_inclusions'
        ordering = ['id']


class ColorMotif(models.Model):
    package = models.ForeignKey(Package, on_delete=models.CASCADE, related_name='color_motifs')
    motif_hex = models.CharField(max_length=20)
    motif_name = models.CharField(max_length=100, default='Manual')

    def __str__(self):
        return f"{self.package.name} - {self.motif_name}"

    class Meta:
        db_table = 'package_color_motifs'
        ordering = ['id']


class MotifAssignment(models.Model):
    """Suggested item variations for one inclusion under one motif"""
    motif = models.ForeignKey(ColorMotif, on_delete=models.CASCADE, related_name='assignments')
    inclusion = models.ForeignKey(PackageInclusion, on_delete=models.CASCADE, related_name='motif_assignments')
    # [{"item_id": 1, "color_name": "Ivory", "color_hex": "#FFFFF0", "size": "M"}, ...]
    assigned_items = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'package_motif_assignments'
        ordering = ['id']


class MeasurementRef(models.Model):
    """Measurement guide for an outfit type used in custom tailoring"""
    outfit_name = models.CharField(max_length=255)
    category = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    # [{"label": "Chest", "guide": "Measure around the fullest part"}, ...]
    measurements = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.outfit_name

    class Meta:
        db_table = 'measurement_refs'
        ordering = ['category', 'outfit_name']
