from django.urls import path

from .consumers import ParkingRoomConsumer

websocket_urlpatterns = [
    path('ws/parkings/', ParkingRoomConsumer.as_asgi()),
]
