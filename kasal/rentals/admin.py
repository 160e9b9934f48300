from django.contrib import admin
from .models import Rental, RentalItem, RentalPackage, CustomTailoringItem, PackageFulfillment, Payment


class RentalItemInline(admin.TabularInline):
    model = RentalItem
    extra = 0
    raw_id_fields = ['item', 'variation']


class RentalPackageInline(admin.TabularInline):
    model = RentalPackage
    extra = 0
    raw_id_fields = ['package']


class CustomTailoringItemInline(admin.StackedInline):
    model = CustomTailoringItem
    extra = 0
    readonly_fields = ['reference', 'created_at', 'updated_at']


class PaymentInline(admin.TabularInline):
    model = Payment
    fk_name = 'rental'
    extra = 0
    exclude = ['reservation']


@admin.register(Rental)
class RentalAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'customer_phone', 'status', 'rental_start_date', 'rental_end_date', 'created_at']
    list_filter = ['status', 'return_reminder_sent', 'rental_start_date']
    search_fields = ['id', 'customer_name', 'customer_phone', 'customer_email']
    date_hierarchy = 'rental_start_date'
    readonly_fields = ['id', 'source_reservation', 'created_by', 'created_at', 'updated_at']
    inlines = [RentalItemInline, RentalPackageInline, CustomTailoringItemInline, PaymentInline]


@admin.register(PackageFulfillment)
class PackageFulfillmentAdmin(admin.ModelAdmin):
    list_display = ['rental_package', 'role', 'wearer_name', 'is_custom', 'assigned_name', 'variation_label']
    list_filter = ['is_custom']
    search_fields = ['role', 'wearer_name', 'assigned_name', 'rental_package__rental__id']
    raw_id_fields = ['rental_package', 'item', 'variation', 'custom_item']


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'rental', 'reservation', 'amount', 'method', 'paid_at']
    list_filter = ['method']
    search_fields = ['rental__id', 'reservation__id', 'reference_number']
    raw_id_fields = ['rental', 'reservation']
