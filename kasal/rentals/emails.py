import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)

SHOP_NAME = 'Kasal atbp. Avenue'


def send_return_reminder(rental):
    """
    Email the customer that ``rental`` is due back today.

    Raises ValueError when the rental has no customer email; SMTP errors
    propagate so callers can decide whether to keep going.
    """
    if not rental.customer_email:
        raise ValueError(f"Rental {rental.id} has no customer email address.")

    return_date = rental.rental_end_date.strftime('%A, %B %d, %Y')
    subject = 'Friendly Reminder: Your Rental is Due for Return Today!'
    text = (
        f"Hi {rental.customer_name},\n\n"
        f"This is a friendly reminder that your rental (ID: {rental.id}) is due to be returned today, {return_date}.\n\n"
        f"Please ensure all items are returned to avoid any late fees.\n\n"
        f"Thank you for choosing {SHOP_NAME}!"
    )
    html = (
        '<div style="font-family: Arial, sans-serif; line-height: 1.6;">'
        '<h2>Friendly Return Reminder</h2>'
        f'<p>Hi {rental.customer_name},</p>'
        f'<p>This is a friendly reminder that your rental with ID <strong>{rental.id}</strong> '
        f'is due to be returned today, <strong>{return_date}</strong>.</p>'
        '<p>Please ensure all items are returned to avoid any late fees as per our rental agreement.</p>'
        f'<p>Sincerely,<br><strong>The Team at {SHOP_NAME}</strong></p>'
        '</div>'
    )

    send_mail(
        subject,
        text,
        settings.DEFAULT_FROM_EMAIL,
        [rental.customer_email],
        html_message=html,
        fail_silently=False,
    )
    logger.info(f"Return reminder sent to {rental.customer_email} for rental {rental.id}")
