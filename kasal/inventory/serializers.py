from rest_framework import serializers

from .models import DamagedItem


class DamagedItemSerializer(serializers.ModelSerializer):
    is_inventory_item = serializers.BooleanField(read_only=True)
    custom_item_reference = serializers.CharField(source='custom_item.reference', read_only=True, allow_null=True)

    class Meta:
        model = DamagedItem
        fields = ['id', 'variation', 'custom_item', 'custom_item_reference', 'is_inventory_item', 'item_name',
                  'variation_label', 'image_url', 'rental', 'rental_reference', 'quantity', 'damage_reason',
                  'damage_notes', 'status', 'created_at', 'updated_at']
        read_only_fields = fields


class DamagedItemStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DamagedItem.STATUS_CHOICES)
    damage_notes = serializers.CharField(required=False, allow_blank=True)
