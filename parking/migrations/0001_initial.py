import django.core.validators
import django.db.models.deletion
import parking.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ParkingLot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('parking_id', models.CharField(default=parking.models.generate_parking_id, editable=False, max_length=20, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('latitude', models.FloatField(validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('longitude', models.FloatField(validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('street', models.CharField(blank=True, max_length=200)),
                ('city', models.CharField(blank=True, db_index=True, max_length=100)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('country', models.CharField(blank=True, max_length=100)),
                ('postal_code', models.CharField(blank=True, max_length=20)),
                ('parking_type', models.CharField(choices=[('opensky', 'Open Sky'), ('closedsky', 'Covered')], default='opensky', max_length=20)),
                ('payment_type', models.CharField(choices=[('free', 'Free'), ('paid', 'Paid')], default='free', max_length=10)),
                ('ownership_type', models.CharField(choices=[('private', 'Private'), ('public', 'Public')], default='public', max_length=10)),
                ('capacity_car', models.PositiveIntegerField(default=0)),
                ('capacity_bike', models.PositiveIntegerField(default=0)),
                ('capacity_bus_truck', models.PositiveIntegerField(default=0)),
                ('current_car', models.PositiveIntegerField(default=0)),
                ('current_bike', models.PositiveIntegerField(default=0)),
                ('current_bus_truck', models.PositiveIntegerField(default=0)),
                ('hourly_rate_car', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('hourly_rate_bike', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('hourly_rate_bus_truck', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('is_approved', models.BooleanField(default=True)),
                ('last_updated', models.DateTimeField(auto_now_add=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='owned_parkings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['latitude', 'longitude'], name='parking_lat_lng_idx'),
                    models.Index(fields=['is_active', 'is_approved'], name='parking_active_approved_idx'),
                    models.Index(fields=['created_at'], name='parking_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('current_car__lte', models.F('capacity_car'))), name='parking_car_within_capacity'),
                    models.CheckConstraint(condition=models.Q(('current_bike__lte', models.F('capacity_bike'))), name='parking_bike_within_capacity'),
                    models.CheckConstraint(condition=models.Q(('current_bus_truck__lte', models.F('capacity_bus_truck'))), name='parking_bus_truck_within_capacity'),
                ],
            },
        ),
    ]
