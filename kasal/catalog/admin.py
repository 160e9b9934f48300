from django.contrib import admin
from .models import Item, ItemVariation, Package, PackageInclusion, ColorMotif, MeasurementRef


class ItemVariationInline(admin.TabularInline):
    model = ItemVariation
    extra = 0


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'age_group', 'gender', 'heart_count', 'updated_at']
    list_filter = ['category', 'age_group', 'gender']
    search_fields = ['name', 'category', 'description']
    ordering = ['name']
    inlines = [ItemVariationInline]
    readonly_fields = ['heart_count', 'created_at', 'updated_at']


class PackageInclusionInline(admin.TabularInline):
    model = PackageInclusion
    extra = 0


class ColorMotifInline(admin.TabularInline):
    model = ColorMotif
    extra = 0


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ['name', 'price', 'updated_at']
    search_fields = ['name', 'description']
    ordering = ['price']
    inlines = [PackageInclusionInline, ColorMotifInline]
    readonly_fields = ['created_at', 'updated_at']


@admin.register(MeasurementRef)
class MeasurementRefAdmin(admin.ModelAdmin):
    list_display = ['outfit_name', 'category', 'updated_at']
    list_filter = ['category']
    search_fields = ['outfit_name', 'category']
