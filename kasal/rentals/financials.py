"""
Pricing, deposits and totals for rentals and reservations.

Every screen that shows money goes through ``calculate_financials`` so the
storefront, the back office and the dashboard agree on the figures.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def _money(value):
    return Decimal(value or 0).quantize(CENTS, rounding=ROUND_HALF_UP)


def _line_total(line):
    return Decimal(line.get('price') or 0) * int(line.get('quantity') or 1)


def calculate_financials(single_items=(), packages=(), custom_items=(), shop_discount=ZERO,
                         deposit_amount=ZERO, total_paid=ZERO, deposit_reimbursed=ZERO):
    """
    Calculate subtotal, deposit and balance figures.

    Lines are dicts with ``price`` and ``quantity`` (default 1); custom items
    also carry ``tailoring_type``. A stored deposit above zero overrides the
    required deposit.
    """
    rules = settings.KASAL_RENTAL
    subtotal = Decimal('0')
    required_deposit = Decimal('0')

    for line in single_items:
        subtotal += _line_total(line)
        required_deposit += min(Decimal(line.get('price') or 0), rules['SINGLE_ITEM_DEPOSIT_CAP']) * int(line.get('quantity') or 1)

    for line in packages:
        subtotal += _line_total(line)
        required_deposit += rules['PACKAGE_DEPOSIT'] * int(line.get('quantity') or 1)

    for line in custom_items:
        subtotal += _line_total(line)
        # Rent-back pieces carry their full price as deposit
        if line.get('tailoring_type') == 'Tailored for Rent-Back':
            required_deposit += _line_total(line)

    shop_discount = Decimal(shop_discount or 0)
    deposit_amount = Decimal(deposit_amount or 0)
    final_deposit = deposit_amount if deposit_amount > 0 else required_deposit
    items_total = subtotal - shop_discount
    grand_total = items_total + final_deposit
    total_paid = Decimal(total_paid or 0)

    return {
        'subtotal': _money(subtotal),
        'shop_discount': _money(shop_discount),
        'items_total': _money(items_total),
        'required_deposit': _money(required_deposit),
        'deposit_amount': _money(final_deposit),
        'grand_total': _money(grand_total),
        'total_paid': _money(total_paid),
        'remaining_balance': _money(grand_total - total_paid),
        'deposit_reimbursed': _money(deposit_reimbursed),
    }


def _payments_total(payments):
    return sum((payment.amount for payment in payments), Decimal('0'))


def rental_financials(rental):
    """Financials for a saved rental; use prefetched lines where available"""
    return calculate_financials(
        single_items=[{'price': line.price, 'quantity': line.quantity} for line in rental.items.all()],
        packages=[{'price': line.price, 'quantity': line.quantity} for line in rental.packages.all()],
        custom_items=[
            {'price': line.price, 'quantity': line.quantity, 'tailoring_type': line.tailoring_type}
            for line in rental.custom_items.all()
        ],
        shop_discount=rental.shop_discount,
        deposit_amount=rental.deposit_amount,
        total_paid=_payments_total(rental.payments.all()),
        deposit_reimbursed=rental.deposit_reimbursed,
    )


def reservation_financials(reservation):
    """Financials for a saved reservation; packages always count once"""
    return calculate_financials(
        single_items=[{'price': line.price, 'quantity': line.quantity} for line in reservation.item_reservations.all()],
        packages=[{'price': line.price, 'quantity': 1} for line in reservation.package_reservations.all()],
        shop_discount=reservation.shop_discount,
        deposit_amount=reservation.deposit_amount,
        total_paid=_payments_total(reservation.payments.all()),
    )
