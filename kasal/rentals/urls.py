from django.urls import path
from .views import (
    rental_list_create, rental_detail, rental_send_reminder, rental_process, rental_reschedule,
    rental_check_reschedule, rental_add_items, rental_item_detail, rental_package_detail, rental_customer,
    rental_custom_item_detail, rental_pre_pickup_validation, rental_from_reservation, rental_process_return,
    rental_dismiss_conversion, rental_convert_custom_item, rental_cancel
)

urlpatterns = [
    path('', rental_list_create, name='rental-list-create'),
    path('from-reservation/', rental_from_reservation, name='rental-from-reservation'),
    path('<str:pk>/', rental_detail, name='rental-detail'),

    # Lifecycle
    path('<str:pk>/process/', rental_process, name='rental-process'),
    path('<str:pk>/process-return/', rental_process_return, name='rental-process-return'),
    path('<str:pk>/cancel/', rental_cancel, name='rental-cancel'),
    path('<str:pk>/reschedule/', rental_reschedule, name='rental-reschedule'),
    path('<str:pk>/check-reschedule/', rental_check_reschedule, name='rental-check-reschedule'),
    path('<str:pk>/send-reminder/', rental_send_reminder, name='rental-send-reminder'),
    path('<str:pk>/pre-pickup-validation/', rental_pre_pickup_validation, name='rental-pre-pickup-validation'),

    # Lines
    path('<str:pk>/add-items/', rental_add_items, name='rental-add-items'),
    path('<str:pk>/items/<int:item_id>/', rental_item_detail, name='rental-item-detail'),
    path('<str:pk>/packages/<int:package_id>/', rental_package_detail, name='rental-package-detail'),
    path('<str:pk>/custom-items/<int:item_id>/', rental_custom_item_detail, name='rental-custom-item-detail'),
    path('<str:pk>/customer/', rental_customer, name='rental-customer'),

    # Rent-back pieces awaiting conversion into inventory
    path('<str:pk>/pending-conversions/<int:custom_item_id>/', rental_dismiss_conversion, name='rental-dismiss-conversion'),
    path('<str:pk>/pending-conversions/<int:custom_item_id>/convert/', rental_convert_custom_item, name='rental-convert-custom-item'),
]
