from django.urls import path
from .views import (
    reservation_list_create, reservation_detail, reservation_customer, reservation_confirm, reservation_cancel,
    reservation_reschedule, reservation_check_availability,
    appointment_list_create, appointment_booked_slots, appointment_detail, appointment_cancel, appointment_process,
    unavailability_list_create, unavailability_dates, unavailability_by_date, unavailability_detail,
    track_request
)

urlpatterns = [
    # Reservation endpoints
    path('reservations/', reservation_list_create, name='reservation-list-create'),
    path('reservations/<str:pk>/', reservation_detail, name='reservation-detail'),
    path('reservations/<str:pk>/customer/', reservation_customer, name='reservation-customer'),
    path('reservations/<str:pk>/confirm/', reservation_confirm, name='reservation-confirm'),
    path('reservations/<str:pk>/cancel/', reservation_cancel, name='reservation-cancel'),
    path('reservations/<str:pk>/reschedule/', reservation_reschedule, name='reservation-reschedule'),
    path('reservations/<str:pk>/check-availability/', reservation_check_availability, name='reservation-check-availability'),

    # Appointment endpoints
    path('appointments/', appointment_list_create, name='appointment-list-create'),
    path('appointments/booked-slots/', appointment_booked_slots, name='appointment-booked-slots'),
    path('appointments/<str:pk>/', appointment_detail, name='appointment-detail'),
    path('appointments/<str:pk>/cancel/', appointment_cancel, name='appointment-cancel'),
    path('appointments/<str:pk>/process/', appointment_process, name='appointment-process'),

    # Shop closures
    path('unavailability/', unavailability_list_create, name='unavailability-list-create'),
    path('unavailability/dates/', unavailability_dates, name='unavailability-dates'),
    path('unavailability/by-date/<str:date>/', unavailability_by_date, name='unavailability-by-date'),
    path('unavailability/<int:pk>/', unavailability_detail, name='unavailability-detail'),

    path('track/<str:reference>/', track_request, name='track-request'),
]
