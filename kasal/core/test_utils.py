"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from kasal.core.models import Permission, Role
from kasal.catalog.models import Item, ItemVariation, Package, PackageInclusion, ColorMotif
from kasal.bookings.models import Reservation, ItemReservation, PackageReservation, FulfillmentPreview, Appointment
from kasal.rentals.models import Rental, RentalItem, RentalPackage, PackageFulfillment, CustomTailoringItem
from decimal import Decimal
from datetime import timedelta
import random
import string

User = get_user_model()

CUSTOMER_INFO = {
    'name': 'Maria Clara',
    'email': 'maria@example.com',
    'phone_number': '09171234567',
    'address': {'province': 'Laguna', 'city': 'Calamba', 'barangay': 'Real', 'street': 'Rizal St'},
}


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_superuser=True, permissions=None):
        """Create a test user; pass ``permissions`` to get a non-superuser with a role carrying those codes"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=True,
            is_superuser=is_superuser and permissions is None,
        )
        if permissions is not None:
            user.role = TestDataFactory.create_role(permissions=permissions)
            user.save(update_fields=['role'])
        return user

    @staticmethod
    def create_role(name=None, permissions=()):
        """Create a role carrying the given permission codes"""
        if not name:
            name = f'Role_{TestDataFactory.random_string(6)}'
        role = Role.objects.create(name=name)
        for code in permissions:
            permission, _ = Permission.objects.get_or_create(code=code)
            role.permissions.add(permission)
        return role

    @staticmethod
    def create_item(name=None, price=None, category='Gown', variations=None):
        """Create an item with variations; ``variations`` is a list of (color_name, size, quantity)"""
        if not name:
            name = f'Item {TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('1500.00')
        item = Item.objects.create(name=name, price=price, category=category)
        for color_name, size, quantity in variations or [('Ivory', 'M', 5)]:
            ItemVariation.objects.create(
                item=item,
                color_name=color_name,
                color_hex='#FFFFF0',
                size=size,
                quantity=quantity,
                image_url=f'https://img.test/{item.id}/{color_name}-{size}.jpg',
            )
        return item

    @staticmethod
    def create_variation(quantity=5, price=None, color_name='Ivory', size='M'):
        """Create a single-variation item and return the variation"""
        item = TestDataFactory.create_item(price=price, variations=[(color_name, size, quantity)])
        return item.variations.get()

    @staticmethod
    def create_package(name=None, price=None, roles=('Bride', 'Groom')):
        """Create a package with one wearable inclusion per role and a default motif"""
        if not name:
            name = f'Package {TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('10000.00')
        package = Package.objects.create(name=name, price=price, image_urls=['https://img.test/package.jpg'])
        for role in roles:
            PackageInclusion.objects.create(package=package, name=role, wearer_num=1)
        ColorMotif.objects.create(package=package, motif_hex='#C0C0C0', motif_name='Silver')
        return package

    @staticmethod
    def create_rental(user=None, status='Pending', start_date=None, customer_info=None, **kwargs):
        """Create an empty rental; lines are added with the helpers below"""
        start_date = start_date or timezone.localdate()
        rental = Rental(
            rental_start_date=start_date,
            rental_end_date=kwargs.pop('end_date', start_date + timedelta(days=3)),
            status=status,
            created_by=user,
            **kwargs
        )
        rental.set_customer_info(customer_info or CUSTOMER_INFO)
        rental.save()
        return rental

    @staticmethod
    def add_rental_item(rental, variation, quantity=1, take_stock=True):
        """Attach a single-item line; ``take_stock`` mirrors the decrement the API performs"""
        if take_stock:
            ItemVariation.objects.filter(pk=variation.pk).update(quantity=variation.quantity - quantity)
            variation.refresh_from_db()
        return RentalItem.objects.create(
            rental=rental,
            item=variation.item,
            variation=variation,
            name=variation.item.name,
            color_name=variation.color_name,
            color_hex=variation.color_hex,
            size=variation.size,
            price=variation.item.price,
            quantity=quantity,
        )

    @staticmethod
    def add_rental_package(rental, package, assignments, take_stock=True):
        """Attach a package line; ``assignments`` maps role -> variation (or None for a custom role)"""
        rental_package = RentalPackage.objects.create(
            rental=rental, package=package, name=package.name, motif_name='Silver', price=package.price,
        )
        for role, variation in assignments.items():
            if variation and take_stock:
                ItemVariation.objects.filter(pk=variation.pk).update(quantity=variation.quantity - 1)
                variation.refresh_from_db()
            PackageFulfillment.objects.create(
                rental_package=rental_package,
                role=role,
                is_custom=variation is None,
                item=variation.item if variation else None,
                variation=variation,
                assigned_name=variation.item.name if variation else '',
                variation_label=variation.label if variation else '',
            )
        return rental_package

    @staticmethod
    def add_custom_item(rental, name='Barong Tagalog', price=None, tailoring_type=CustomTailoringItem.PURCHASE, **kwargs):
        return CustomTailoringItem.objects.create(
            rental=rental,
            name=name,
            price=price if price is not None else Decimal('3000.00'),
            tailoring_type=tailoring_type,
            **kwargs
        )

    @staticmethod
    def create_reservation(reserve_date=None, status='Pending', variation=None, quantity=1, package=None,
                           assignments=None):
        """Create a reservation with an optional item line and package line"""
        reservation = Reservation(reserve_date=reserve_date or timezone.localdate() + timedelta(days=7), status=status)
        reservation.set_customer_info(CUSTOMER_INFO)
        reservation.save()
        if variation:
            ItemReservation.objects.create(
                reservation=reservation,
                item=variation.item,
                variation=variation,
                item_name=variation.item.name,
                color_name=variation.color_name,
                color_hex=variation.color_hex,
                size=variation.size,
                quantity=quantity,
                price=variation.item.price,
            )
        if package:
            package_reservation = PackageReservation.objects.create(
                reservation=reservation, package=package, package_name=package.name, price=package.price,
            )
            for role, assigned in (assignments or {}).items():
                FulfillmentPreview.objects.create(
                    package_reservation=package_reservation,
                    role=role,
                    is_custom=assigned is None,
                    item=assigned.item if assigned else None,
                    variation=assigned,
                    variation_label=assigned.label if assigned else '',
                )
        return reservation

    @staticmethod
    def create_appointment(appointment_date=None, time_block='morning', status='Pending', **kwargs):
        appointment = Appointment(
            appointment_date=appointment_date or timezone.localdate() + timedelta(days=2),
            time_block=time_block,
            status=status,
            **kwargs
        )
        appointment.set_customer_info(CUSTOMER_INFO)
        appointment.save()
        return appointment


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
