from django.contrib import admin
from .models import Reservation, ItemReservation, PackageReservation, FulfillmentPreview, Appointment, Unavailability


class ItemReservationInline(admin.TabularInline):
    model = ItemReservation
    extra = 0
    raw_id_fields = ['item', 'variation']


class PackageReservationInline(admin.TabularInline):
    model = PackageReservation
    extra = 0
    raw_id_fields = ['package']


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'customer_phone', 'reserve_date', 'status', 'created_at']
    list_filter = ['status', 'reserve_date']
    search_fields = ['id', 'customer_name', 'customer_phone', 'customer_email']
    date_hierarchy = 'reserve_date'
    readonly_fields = ['id', 'required_deposit', 'created_at', 'updated_at']
    inlines = [ItemReservationInline, PackageReservationInline]


@admin.register(FulfillmentPreview)
class FulfillmentPreviewAdmin(admin.ModelAdmin):
    list_display = ['package_reservation', 'role', 'wearer_name', 'is_custom', 'variation_label', 'linked_appointment']
    list_filter = ['is_custom']
    raw_id_fields = ['package_reservation', 'item', 'variation', 'linked_appointment']


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'customer_phone', 'appointment_date', 'time_block', 'status']
    list_filter = ['status', 'time_block', 'appointment_date']
    search_fields = ['id', 'customer_name', 'customer_phone']
    raw_id_fields = ['source_reservation', 'rental']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(Unavailability)
class UnavailabilityAdmin(admin.ModelAdmin):
    list_display = ['date', 'reason', 'is_full_day']
    list_filter = ['is_full_day']
    ordering = ['date']
