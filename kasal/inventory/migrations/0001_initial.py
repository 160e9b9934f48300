# Generated manually for damaged item tracking

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('rentals', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DamagedItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_name', models.CharField(max_length=255)),
                ('variation_label', models.CharField(blank=True, max_length=255)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('rental_reference', models.CharField(blank=True, max_length=20)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('damage_reason', models.CharField(max_length=255)),
                ('damage_notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('Awaiting Repair', 'Awaiting Repair'), ('Under Repair', 'Under Repair'), ('Repaired', 'Repaired'), ('Disposed', 'Disposed')], default='Awaiting Repair', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('custom_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='damage_reports', to='rentals.customtailoringitem')),
                ('rental', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='damaged_items', to='rentals.rental')),
                ('variation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='damage_reports', to='catalog.itemvariation')),
            ],
            options={
                'db_table': 'damaged_items',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='damaged_status_idx'),
                    models.Index(fields=['rental_reference'], name='damaged_rental_idx'),
                ],
            },
        ),
    ]
