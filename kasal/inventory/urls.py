from django.urls import path
from .views import damaged_item_list, damaged_item_detail

urlpatterns = [
    path('damaged-items/', damaged_item_list, name='damaged-item-list'),
    path('damaged-items/<int:pk>/', damaged_item_detail, name='damaged-item-detail'),
]
