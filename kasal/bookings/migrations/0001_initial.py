# Generated manually for the initial bookings schema

import django.core.validators
import django.db.models.deletion
import kasal.bookings.models
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Reservation',
            fields=[
                ('customer_name', models.CharField(max_length=255)),
                ('customer_email', models.EmailField(blank=True, max_length=254)),
                ('customer_phone', models.CharField(max_length=30)),
                ('address_province', models.CharField(blank=True, max_length=100)),
                ('address_city', models.CharField(blank=True, max_length=100)),
                ('address_barangay', models.CharField(blank=True, max_length=100)),
                ('address_street', models.CharField(blank=True, max_length=255)),
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False)),
                ('reserve_date', models.DateField()),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Confirmed', 'Confirmed'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Pending', max_length=20)),
                ('shop_discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('deposit_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('required_deposit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('package_appointment_date', models.DateField(blank=True, null=True)),
                ('package_appointment_block', models.CharField(blank=True, choices=[('morning', 'Morning'), ('afternoon', 'Afternoon')], max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'reservations',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'reserve_date'], name='reservation_status_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='ItemReservation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference', models.CharField(default=kasal.bookings.models.generate_item_reservation_reference, max_length=20)),
                ('item_name', models.CharField(max_length=255)),
                ('color_name', models.CharField(max_length=100)),
                ('color_hex', models.CharField(blank=True, max_length=20)),
                ('size', models.CharField(max_length=20)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.item')),
                ('reservation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='item_reservations', to='bookings.reservation')),
                ('variation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='item_reservations', to='catalog.itemvariation')),
            ],
            options={
                'db_table': 'reservation_items',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='PackageReservation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference', models.CharField(default=kasal.bookings.models.generate_package_reservation_reference, max_length=20)),
                ('package_name', models.CharField(max_length=255)),
                ('motif_hex', models.CharField(blank=True, max_length=20)),
                ('motif_name', models.CharField(default='Manual', max_length=100)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('package', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.package')),
                ('reservation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='package_reservations', to='bookings.reservation')),
            ],
            options={
                'db_table': 'reservation_packages',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('customer_name', models.CharField(max_length=255)),
                ('customer_email', models.EmailField(blank=True, max_length=254)),
                ('customer_phone', models.CharField(max_length=30)),
                ('address_province', models.CharField(blank=True, max_length=100)),
                ('address_city', models.CharField(blank=True, max_length=100)),
                ('address_barangay', models.CharField(blank=True, max_length=100)),
                ('address_street', models.CharField(blank=True, max_length=255)),
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False)),
                ('appointment_date', models.DateField()),
                ('time_block', models.CharField(choices=[('morning', 'Morning'), ('afternoon', 'Afternoon')], default='morning', max_length=20)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Confirmed', 'Confirmed'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Pending', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('source_reservation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='appointments', to='bookings.reservation')),
            ],
            options={
                'db_table': 'appointments',
                'ordering': ['-appointment_date', 'time_block'],
                'indexes': [models.Index(fields=['appointment_date', 'status'], name='appointment_date_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='FulfillmentPreview',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(max_length=255)),
                ('wearer_name', models.CharField(blank=True, max_length=255)),
                ('is_custom', models.BooleanField(default=False)),
                ('variation_label', models.CharField(blank=True, max_length=255)),
                ('notes', models.TextField(blank=True)),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.item')),
                ('linked_appointment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fulfillment_rows', to='bookings.appointment')),
                ('package_reservation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fulfillment_preview', to='bookings.packagereservation')),
                ('variation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fulfillment_previews', to='catalog.itemvariation')),
            ],
            options={
                'db_table': 'reservation_fulfillment_preview',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Unavailability',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(unique=True)),
                ('reason', models.CharField(max_length=255)),
                ('is_full_day', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'unavailabilities',
                'ordering': ['date'],
                'verbose_name_plural': 'unavailabilities',
            },
        ),
    ]
