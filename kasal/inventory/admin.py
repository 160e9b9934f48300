from django.contrib import admin
from .models import DamagedItem


@admin.register(DamagedItem)
class DamagedItemAdmin(admin.ModelAdmin):
    list_display = ['item_name', 'variation_label', 'quantity', 'status', 'rental_reference', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['item_name', 'variation_label', 'rental_reference', 'damage_reason']
    raw_id_fields = ['variation', 'custom_item', 'rental']
    readonly_fields = ['created_at', 'updated_at']
