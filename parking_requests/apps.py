from django.apps import AppConfig


class ParkingRequestsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'parking_requests'
    verbose_name = 'Parking Requests'
