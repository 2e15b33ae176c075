import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parking', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_id', models.CharField(db_index=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parking_lot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='parking.parkinglot')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'created_at'], name='booking_user_created_idx'),
                    models.Index(fields=['parking_lot', 'created_at'], name='booking_lot_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(max_length=100)),
                ('registration_number', models.CharField(db_index=True, max_length=50)),
                ('in_time', models.DateTimeField(db_index=True)),
                ('out_time', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('IN', 'In (reserved or parked)'), ('OUT', 'Out (awaiting settlement)'), ('DONE', 'Done (settled)')], db_index=True, default='IN', max_length=4)),
                ('remark', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('booking', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='vehicle', to='bookings.booking')),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='vehicles', to='parking.category')),
            ],
            options={
                'ordering': ['in_time'],
                'indexes': [models.Index(fields=['status', 'in_time'], name='vehicle_status_in_time_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('registration_number', 'in_time'), name='vehicle_unique_registration_in_time'),
                ],
            },
        ),
    ]
