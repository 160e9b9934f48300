import django_filters
from django.db.models import Q
from .models import Item


class ItemFilter(django_filters.FilterSet):
    """Storefront and back-office filter for items"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    age_group = django_filters.CharFilter(field_name='age_group', lookup_expr='iexact')
    gender = django_filters.CharFilter(method='filter_gender', label='Gender')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    in_stock = django_filters.BooleanFilter(method='filter_in_stock', label='In Stock')

    class Meta:
        model = Item
        fields = ['search', 'category', 'age_group', 'gender', 'min_price', 'max_price', 'in_stock']

    def filter_search(self, queryset, name, value):
        """Every word must appear in the name, category or description"""
        if not value:
            return queryset
        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) | Q(category__icontains=word) | Q(description__icontains=word)
            )
        return queryset

    def filter_gender(self, queryset, name, value):
        # Unisex items show up under either gender
        if not value:
            return queryset
        if value.lower() == 'unisex':
            return queryset.filter(gender='Unisex')
        return queryset.filter(Q(gender__iexact=value) | Q(gender='Unisex'))

    def filter_in_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(variations__quantity__gt=0).distinct()
        return queryset.exclude(variations__quantity__gt=0)
