import logging
from datetime import datetime, time, timedelta
from decimal import Decimal

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.db.models import Count
from django.utils import timezone

from kasal.core.cache_utils import cached_query, DASHBOARD_STATS_CACHE_TTL, DASHBOARD_STATS_PREFIX
from kasal.core.permissions import role_permission
from kasal.rentals.financials import rental_financials
from kasal.rentals.models import Rental
from kasal.rentals.serializers import RentalSerializer

logger = logging.getLogger(__name__)

WEEKDAYS = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


def _rentals():
    return Rental.objects.prefetch_related(
        'items', 'packages__fulfillments__custom_item', 'custom_items', 'payments'
    ).select_related('created_by')


def _start_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.min))


@cached_query(cache_ttl=DASHBOARD_STATS_CACHE_TTL, key_prefix=DASHBOARD_STATS_PREFIX)
def build_dashboard_stats(today):
    """Aggregate the dashboard figures for ``today`` (a local date)"""
    stats = {
        row['status'].replace(' ', ''): row['count']
        for row in Rental.objects.values('status').annotate(count=Count('id')).order_by()
    }

    month_start = _start_of_day(today.replace(day=1))
    monthly_sales = sum(
        (rental_financials(rental)['items_total']
         for rental in _rentals().filter(status='Completed', updated_at__gte=month_start)),
        Decimal('0.00')
    )

    # Weeks start on Sunday
    week_start_day = today - timedelta(days=(today.weekday() + 1) % 7)
    weekly = {}
    for rental in _rentals().filter(status__in=['Completed', 'Returned'], updated_at__gte=_start_of_day(week_start_day)):
        weekday = WEEKDAYS[(timezone.localtime(rental.updated_at).weekday() + 1) % 7]
        weekly[weekday] = weekly.get(weekday, Decimal('0.00')) + rental_financials(rental)['items_total']
    weekly_sales = [{'day': day, 'total_sales': weekly[day]} for day in WEEKDAYS if day in weekly]

    to_return = _rentals().filter(status='To Return').order_by('rental_end_date')
    overdue = to_return.filter(rental_end_date__lt=today)

    logger.debug(f"Dashboard stats built for {today}")
    return {
        'stats': stats,
        'monthly_sales': monthly_sales,
        'to_return_orders': list(RentalSerializer(to_return[:5], many=True).data),
        'overdue_orders': list(RentalSerializer(overdue[:5], many=True).data),
        'weekly_sales_data': weekly_sales,
    }


@api_view(['GET'])
@permission_classes([role_permission('view_dashboard')])
def dashboard_stats(request):
    """Rental status counts, sales totals and the return queue (cached for 5 minutes)"""
    return Response(build_dashboard_stats(timezone.localdate()))
