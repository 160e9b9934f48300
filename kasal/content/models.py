from django.db import models


def default_hero():
    return {'title': 'Find your perfect outfit', 'search_placeholder': 'Dress color, type, or name', 'image_url': ''}


def default_quality_cta():
    return {'title': 'High Quality Outfits', 'points': [], 'button_text': 'Order Now', 'image_url': ''}


class HomePageContent(models.Model):
    """Singleton row with the storefront home page sections"""
    SINGLETON_ID = 1

    hero = models.JSONField(default=default_hero, blank=True)
    # [{"icon": "...", "title": "...", "description": "..."}, ...]
    features = models.JSONField(default=list, blank=True)
    # [{"title": "...", "text": "...", "image_url": "...", "path": "..."}, ...]
    services = models.JSONField(default=list, blank=True)
    quality_cta = models.JSONField(default=default_quality_cta, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return 'Home page content'

    class Meta:
        db_table = 'home_page_content'
        verbose_name_plural = 'home page content'

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        content, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return content


class Page(models.Model):
    slug = models.SlugField(max_length=100, unique=True)
    title = models.CharField(max_length=255)
    content = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'pages'
        ordering = ['slug']
