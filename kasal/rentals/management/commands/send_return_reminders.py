import logging

from django.core.management.base import BaseCommand
from django.utils import timezone

from kasal.rentals.emails import send_return_reminder
from kasal.rentals.models import Rental

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Email customers whose rentals are due back today (run once a day, e.g. from cron at 08:00)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the rentals that would be reminded without sending anything',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        today = timezone.localdate()
        due = Rental.objects.filter(
            status='To Return',
            rental_end_date=today,
            return_reminder_sent=False,
        ).exclude(customer_email='')

        self.stdout.write(f"Found {due.count()} rental(s) due for return on {today}.")
        sent = failed = 0

        for rental in due:
            if dry_run:
                self.stdout.write(f"  - Would remind {rental.customer_email} for rental {rental.id}")
                continue
            try:
                send_return_reminder(rental)
            except Exception as e:
                failed += 1
                logger.error(f"Failed to send return reminder for rental {rental.id}: {e}")
                self.stdout.write(self.style.ERROR(f"  ✗ {rental.id}: {e}"))
                continue
            rental.return_reminder_sent = True
            rental.save(update_fields=['return_reminder_sent', 'updated_at'])
            sent += 1
            self.stdout.write(self.style.SUCCESS(f"  ✓ Reminder sent for rental {rental.id}"))

        if dry_run:
            self.stdout.write(self.style.WARNING('Dry run complete. No emails were sent.'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Reminders sent: {sent}, failed: {failed}.'))
