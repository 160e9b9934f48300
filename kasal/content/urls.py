from django.urls import path
from .views import home_content, page_list_create, page_detail

urlpatterns = [
    path('content/home/', home_content, name='content-home'),
    path('content/pages/', page_list_create, name='content-page-list-create'),
    path('content/pages/<slug:slug>/', page_detail, name='content-page-detail'),
]
