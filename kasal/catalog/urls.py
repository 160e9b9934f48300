from django.urls import path
from .views import (
    item_list_create, item_detail, item_by_name, item_heart,
    package_list_create, package_detail, package_check_name,
    measurement_ref_list_create, measurement_ref_detail
)

urlpatterns = [
    # Item endpoints
    path('items/', item_list_create, name='item-list-create'),
    path('items/by-name/', item_by_name, name='item-by-name'),
    path('items/<int:pk>/', item_detail, name='item-detail'),
    path('items/<int:pk>/heart/', item_heart, name='item-heart'),

    # Package endpoints
    path('packages/', package_list_create, name='package-list-create'),
    path('packages/check-name/', package_check_name, name='package-check-name'),
    path('packages/<int:pk>/', package_detail, name='package-detail'),

    # Measurement reference endpoints
    path('measurement-refs/', measurement_ref_list_create, name='measurement-ref-list-create'),
    path('measurement-refs/<int:pk>/', measurement_ref_detail, name='measurement-ref-detail'),
]
