"""
URL configuration for the kasal project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Kasal atbp. Avenue Admin Panel"
admin.site.site_title = "Kasal Admin Portal"
admin.site.index_title = "Welcome to the Kasal back office"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('kasal.core.urls')),
    path('api/v1/', include('kasal.catalog.urls')),
    path('api/v1/', include('kasal.inventory.urls')),
    path('api/v1/', include('kasal.bookings.urls')),
    path('api/v1/rentals/', include('kasal.rentals.urls')),
    path('api/v1/', include('kasal.content.urls')),
    path('api/v1/', include('kasal.reports.urls')),
]
