from rest_framework import serializers

from .models import HomePageContent, Page


class HomePageContentSerializer(serializers.ModelSerializer):
    class Meta:
        model = HomePageContent
        fields = ['hero', 'features', 'services', 'quality_cta', 'updated_at']
        read_only_fields = ['updated_at']

    def validate_hero(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Hero must be an object.')
        return value

    def validate_quality_cta(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Quality CTA must be an object.')
        return value

    def validate_features(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Features must be a list.')
        for feature in value:
            if not isinstance(feature, dict) or not all(feature.get(key) for key in ('icon', 'title', 'description')):
                raise serializers.ValidationError('Each feature needs an icon, title and description.')
        return value

    def validate_services(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Services must be a list.')
        for service in value:
            if not isinstance(service, dict) or not all(service.get(key) for key in ('title', 'text', 'path')):
                raise serializers.ValidationError('Each service needs a title, text and path.')
        return value


class PageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Page
        fields = ['id', 'slug', 'title', 'content', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
