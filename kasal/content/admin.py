from django.contrib import admin
from .models import HomePageContent, Page


@admin.register(HomePageContent)
class HomePageContentAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'updated_at']
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        return not HomePageContent.objects.exists()


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ['slug', 'title', 'updated_at']
    search_fields = ['slug', 'title']
    prepopulated_fields = {'slug': ['title']}
