from django.db import transaction
from rest_framework import serializers

from .models import Item, ItemVariation, Package, PackageInclusion, ColorMotif, MotifAssignment, MeasurementRef


class ItemVariationSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(required=False)
    label = serializers.CharField(read_only=True)

    class Meta:
        model = ItemVariation
        fields = ['id', 'color_name', 'color_hex', 'size', 'quantity', 'image_url', 'label']


class ItemSerializer(serializers.ModelSerializer):
    variations = ItemVariationSerializer(many=True, required=False)
    total_stock = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = ['id', 'name', 'price', 'category', 'description', 'features', 'composition',
                  'age_group', 'gender', 'heart_count', 'variations', 'total_stock',
                  'created_at', 'updated_at']
        read_only_fields = ['heart_count', 'created_at', 'updated_at']

    def get_total_stock(self, obj):
        return sum(variation.quantity for variation in obj.variations.all())

    def validate_variations(self, value):
        seen = set()
        for variation in value:
            key = (variation['color_name'].strip().lower(), variation['size'].strip().lower())
            if key in seen:
                raise serializers.ValidationError(
                    f"Duplicate variation: {variation['color_name']}, {variation['size']}"
                )
            seen.add(key)
        return value

    @transaction.atomic
    def create(self, validated_data):
        variations_data = validated_data.pop('variations', [])
        item = Item.objects.create(**validated_data)
        for variation_data in variations_data:
            variation_data.pop('id', None)
            ItemVariation.objects.create(item=item, **variation_data)
        return item

    @transaction.atomic
    def update(self, instance, validated_data):
        variations_data = validated_data.pop('variations', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if variations_data is not None:
            # Upsert on (colour, size) so rental lines keep pointing at the same rows
            existing = {(v.color_name, v.size): v for v in instance.variations.all()}
            kept_ids = []
            for variation_data in variations_data:
                variation_data.pop('id', None)
                key = (variation_data['color_name'], variation_data['size'])
                variation = existing.get(key)
                if variation:
                    for attr, value in variation_data.items():
                        setattr(variation, attr, value)
                    variation.save()
                else:
                    variation = ItemVariation.objects.create(item=instance, **variation_data)
                kept_ids.append(variation.id)
            instance.variations.exclude(id__in=kept_ids).delete()
        return instance


class MotifAssignmentSerializer(serializers.ModelSerializer):
    inclusion_index = serializers.IntegerField(write_only=True, required=False, min_value=0)
    inclusion_name = serializers.CharField(source='inclusion.name', read_only=True)

    class Meta:
        model = MotifAssignment
        fields = ['id', 'inclusion', 'inclusion_index', 'inclusion_name', 'assigned_items']
        read_only_fields = ['inclusion']


class ColorMotifSerializer(serializers.ModelSerializer):
    assignments = MotifAssignmentSerializer(many=True, required=False)

    class Meta:
        model = ColorMotif
        fields = ['id', 'motif_hex', 'motif_name', 'assignments']


class PackageInclusionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PackageInclusion
        fields = ['id', 'wearer_num', 'name', 'is_custom', 'type']


class PackageSerializer(serializers.ModelSerializer):
    inclusions = PackageInclusionSerializer(many=True, required=False)
    color_motifs = ColorMotifSerializer(many=True)
    total_wearers = serializers.SerializerMethodField()

    class Meta:
        model = Package
        fields = ['id', 'name', 'description', 'price', 'image_urls', 'inclusions', 'color_motifs',
                  'total_wearers', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        # Duplicate names are reported as 409 by the views
        extra_kwargs = {'name': {'validators': []}}

    def get_total_wearers(self, obj):
        return sum(inclusion.wearer_num for inclusion in obj.inclusions.all())

    def validate_color_motifs(self, value):
        if not value:
            raise serializers.ValidationError('At least one color motif is required.')
        return value

    def validate(self, attrs):
        inclusions = attrs.get('inclusions')
        if self.instance is not None and inclusions is not None and 'color_motifs' not in attrs:
            # Motif assignments point at inclusions, so both are rewritten together
            raise serializers.ValidationError({'color_motifs': 'Color motifs are required when inclusions change.'})
        if inclusions is None and self.instance is not None:
            inclusion_count = self.instance.inclusions.count()
        else:
            inclusion_count = len(inclusions or [])
        for motif in attrs.get('color_motifs', []):
            for assignment in motif.get('assignments', []):
                index = assignment.get('inclusion_index')
                if index is None or index >= inclusion_count:
                    raise serializers.ValidationError(
                        {'color_motifs': f'Assignment references unknown inclusion index {index}.'}
                    )
        return attrs

    def _write_children(self, package, inclusions_data, motifs_data):
        if inclusions_data is not None:
            package.inclusions.all().delete()
            for inclusion_data in inclusions_data:
                inclusion_data.pop('id', None)
                PackageInclusion.objects.create(package=package, **inclusion_data)

        if motifs_data is not None:
            inclusions = list(package.inclusions.all())
            package.color_motifs.all().delete()
            for motif_data in motifs_data:
                assignments_data = motif_data.pop('assignments', [])
                motif_data.pop('id', None)
                motif = ColorMotif.objects.create(package=package, **motif_data)
                for assignment_data in assignments_data:
                    MotifAssignment.objects.create(
                        motif=motif,
                        inclusion=inclusions[assignment_data['inclusion_index']],
                        assigned_items=assignment_data.get('assigned_items', []),
                    )

    @transaction.atomic
    def create(self, validated_data):
        inclusions_data = validated_data.pop('inclusions', [])
        motifs_data = validated_data.pop('color_motifs', [])
        package = Package.objects.create(**validated_data)
        self._write_children(package, inclusions_data, motifs_data)
        return package

    @transaction.atomic
    def update(self, instance, validated_data):
        inclusions_data = validated_data.pop('inclusions', None)
        motifs_data = validated_data.pop('color_motifs', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        self._write_children(instance, inclusions_data, motifs_data)
        return instance


class MeasurementRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = MeasurementRef
        fields = ['id', 'outfit_name', 'category', 'description', 'measurements', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_measurements(self, value):
        for entry in value:
            if not isinstance(entry, dict) or not entry.get('label'):
                raise serializers.ValidationError('Each measurement needs a label.')
        return value
