"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import invalidate_dashboard_cache, invalidate_shop_settings_cache
from .models import ShopSettings

logger = logging.getLogger(__name__)

# Models whose changes affect the dashboard aggregates
DASHBOARD_MODELS = {'Rental', 'RentalItem', 'RentalPackage', 'CustomTailoringItem'}


@receiver([post_save, post_delete], sender=ShopSettings)
def invalidate_shop_settings(sender, instance, **kwargs):
    """Drop the cached settings singleton after it changes"""
    invalidate_shop_settings_cache()


@receiver([post_save, post_delete])
def invalidate_dashboard(sender, instance, **kwargs):
    """Invalidate dashboard stats when rentals or their lines change"""
    if sender.__name__ not in DASHBOARD_MODELS:
        return
    # Invalidate after commit so the cache is not repopulated with stale data
    transaction.on_commit(invalidate_dashboard_cache)
