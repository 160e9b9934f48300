from django.contrib.auth.models import AbstractUser
from django.db import models


class Permission(models.Model):
    """A named capability granted to staff through roles"""
    code = models.CharField(max_length=100, primary_key=True)
    description = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return self.code

    class Meta:
        db_table = 'permissions'
        ordering = ['code']


class Role(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    permissions = models.ManyToManyField(Permission, blank=True, related_name='roles')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'roles'
        ordering = ['name']


class User(AbstractUser):
    """Staff account with a role and an account status"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('suspended', 'Suspended'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.ForeignKey(Role, on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    def get_permission_codes(self):
        """Permission codes granted through the user's role"""
        if not self.role_id:
            return []
        return list(self.role.permissions.values_list('code', flat=True))

    def has_role_permission(self, code):
        if self.is_superuser:
            return True
        return code in self.get_permission_codes()


class ShopSettings(models.Model):
    """Singleton row holding shop-wide settings"""
    SINGLETON_ID = 1

    appointment_slots_per_day = models.PositiveIntegerField(default=8)
    gcash_name = models.CharField(max_length=255, blank=True)
    gcash_number = models.CharField(max_length=50, blank=True)
    shop_address = models.TextField(blank=True)
    shop_contact_number = models.CharField(max_length=50, blank=True)
    shop_email = models.EmailField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return 'Shop settings'

    class Meta:
        db_table = 'shop_settings'
        verbose_name_plural = 'shop settings'

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        settings_obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return settings_obj


class AuditLog(models.Model):
    """Audit log for stock movements and status changes"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stock_reserve', 'Stock Reserved'),
        ('stock_release', 'Stock Released'),
        ('status_change', 'Status Change'),
        ('payment_add', 'Payment Added'),
        ('reschedule', 'Reschedule'),
        ('cancel', 'Cancel'),
        ('return', 'Return'),
        ('damage_report', 'Damage Reported'),
        ('repair', 'Repair Status Change'),
        ('reminder_sent', 'Reminder Sent'),
        ('convert', 'Converted'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., customer or item name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., rental or reservation number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_created_idx'),
            models.Index(fields=['action'], name='audit_action_idx'),
            models.Index(fields=['model_name'], name='audit_model_idx'),
            models.Index(fields=['object_reference'], name='audit_reference_idx'),
        ]


class CustomerInfo(models.Model):
    """Customer snapshot embedded in rentals, reservations and appointments"""
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField(blank=True)
    customer_phone = models.CharField(max_length=30)
    address_province = models.CharField(max_length=100, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_barangay = models.CharField(max_length=100, blank=True)
    address_street = models.CharField(max_length=255, blank=True)

    class Meta:
        abstract = True

    def set_customer_info(self, data):
        address = data.get('address') or {}
        self.customer_name = data.get('name', '')
        self.customer_email = data.get('email') or ''
        self.customer_phone = data.get('phone_number', '')
        self.address_province = address.get('province', '')
        self.address_city = address.get('city', '')
        self.address_barangay = address.get('barangay', '')
        self.address_street = address.get('street', '')

    @property
    def customer_info(self):
        return {
            'name': self.customer_name,
            'email': self.customer_email,
            'phone_number': self.customer_phone,
            'address': {
                'province': self.address_province,
                'city': self.address_city,
                'barangay': self.address_barangay,
                'street': self.address_street,
            },
        }

