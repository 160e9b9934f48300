# Generated manually for the initial rentals schema

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import kasal.rentals.models
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('bookings', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Rental',
            fields=[
                ('customer_name', models.CharField(max_length=255)),
                ('customer_email', models.EmailField(blank=True, max_length=254)),
                ('customer_phone', models.CharField(max_length=30)),
                ('address_province', models.CharField(blank=True, max_length=100)),
                ('address_city', models.CharField(blank=True, max_length=100)),
                ('address_barangay', models.CharField(blank=True, max_length=100)),
                ('address_street', models.CharField(blank=True, max_length=255)),
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False)),
                ('rental_start_date', models.DateField()),
                ('rental_end_date', models.DateField()),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('To Pickup', 'To Pickup'), ('To Return', 'To Return'), ('Returned', 'Returned'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Pending', max_length=20)),
                ('shop_discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('deposit_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('deposit_reimbursed', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('cancellation_reason', models.TextField(blank=True)),
                ('return_reminder_sent', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rentals', to=settings.AUTH_USER_MODEL)),
                ('source_reservation', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rental', to='bookings.reservation')),
            ],
            options={
                'db_table': 'rentals',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'rental_start_date', 'rental_end_date'], name='rental_status_dates_idx'),
                    models.Index(fields=['customer_phone'], name='rental_phone_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RentalItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('color_name', models.CharField(max_length=100)),
                ('color_hex', models.CharField(blank=True, max_length=20)),
                ('size', models.CharField(max_length=20)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('notes', models.TextField(blank=True)),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.item')),
                ('rental', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='rentals.rental')),
                ('variation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rental_items', to='catalog.itemvariation')),
            ],
            options={
                'db_table': 'rental_items',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='RentalPackage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('motif_name', models.CharField(default='Manual', max_length=100)),
                ('motif_hex', models.CharField(blank=True, max_length=20)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('notes', models.TextField(blank=True)),
                ('package', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.package')),
                ('rental', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='packages', to='rentals.rental')),
            ],
            options={
                'db_table': 'rental_packages',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='CustomTailoringItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference', models.CharField(default=kasal.rentals.models.generate_custom_item_reference, max_length=40)),
                ('name', models.CharField(max_length=255)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('notes', models.TextField(blank=True)),
                ('outfit_category', models.CharField(blank=True, max_length=100)),
                ('outfit_type', models.CharField(blank=True, max_length=100)),
                ('tailoring_type', models.CharField(choices=[('Tailored for Purchase', 'Tailored for Purchase'), ('Tailored for Rent-Back', 'Tailored for Rent-Back')], default='Tailored for Purchase', max_length=40)),
                ('measurements', models.JSONField(blank=True, default=dict)),
                ('materials', models.JSONField(blank=True, default=list)),
                ('design_specifications', models.TextField(blank=True)),
                ('reference_images', models.JSONField(blank=True, default=list)),
                ('pending_inventory_conversion', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('rental', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='custom_items', to='rentals.rental')),
                ('source_appointment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='custom_items', to='bookings.appointment')),
            ],
            options={
                'db_table': 'rental_custom_items',
                'ordering': ['id'],
                'unique_together': {('rental', 'reference')},
            },
        ),
        migrations.CreateModel(
            name='PackageFulfillment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(max_length=255)),
                ('wearer_name', models.CharField(blank=True, max_length=255)),
                ('is_custom', models.BooleanField(default=False)),
                ('assigned_name', models.CharField(blank=True, max_length=255)),
                ('variation_label', models.CharField(blank=True, max_length=255)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('custom_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fulfillments', to='rentals.customtailoringitem')),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.item')),
                ('rental_package', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fulfillments', to='rentals.rentalpackage')),
                ('variation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='package_fulfillments', to='catalog.itemvariation')),
            ],
            options={
                'db_table': 'rental_package_fulfillments',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('method', models.CharField(choices=[('Cash', 'Cash'), ('GCash', 'GCash'), ('Bank Transfer', 'Bank Transfer')], default='Cash', max_length=20)),
                ('paid_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('reference_number', models.CharField(blank=True, max_length=100)),
                ('receipt_image_url', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('rental', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='rentals.rental')),
                ('reservation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='bookings.reservation')),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['paid_at', 'id'],
            },
        ),
    ]
