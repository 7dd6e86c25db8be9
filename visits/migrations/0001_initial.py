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
            name='Visit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('latitude', models.FloatField()),
                ('longitude', models.FloatField()),
                ('distance', models.FloatField(help_text='Meters between the reported location and the parking')),
                ('is_verified', models.BooleanField(default=True)),
                ('verification_method', models.CharField(choices=[('gps', 'GPS Proximity')], default='gps', max_length=20)),
                ('coins_earned', models.PositiveIntegerField(default=0)),
                ('visit_date', models.DateTimeField(auto_now_add=True)),
                ('parking', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='visits', to='parking.parkinglot')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='visits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-visit_date'],
                'indexes': [
                    models.Index(fields=['user', 'parking', 'visit_date'], name='visit_user_parking_date_idx'),
                    models.Index(fields=['parking', 'visit_date'], name='visit_parking_date_idx'),
                ],
            },
        ),
    ]
