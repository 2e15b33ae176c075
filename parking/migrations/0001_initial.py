import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('vehicle_cat', models.CharField(max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name_plural': 'Categories',
                'ordering': ['vehicle_cat'],
            },
        ),
        migrations.CreateModel(
            name='ParkingLot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('location', models.CharField(max_length=255)),
                ('img_url', models.URLField(blank=True, max_length=500)),
                ('total_slot', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('booked_slot', models.PositiveIntegerField(default=0, editable=False)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='parking_lots', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['location'], name='parking_lot_location_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('booked_slot__gte', 0)), name='parking_lot_booked_slot_non_negative'),
                    models.CheckConstraint(condition=models.Q(('booked_slot__lte', models.F('total_slot'))), name='parking_lot_booked_slot_within_capacity'),
                ],
            },
        ),
    ]
