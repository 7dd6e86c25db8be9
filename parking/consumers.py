# ==================== PARKING/CONSUMERS.PY ====================
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken
from urllib.parse import parse_qs

from .realtime import parking_group_name

logger = logging.getLogger(__name__)

UNAUTHORIZED_CLOSE_CODE = 4001


@database_sync_to_async
def decode_access_token(raw_token):
    return AccessToken(raw_token)


class ParkingRoomConsumer(AsyncJsonWebsocketConsumer):
    """Relays live vehicle-count changes to clients subscribed to parking rooms.

    The handshake must carry an access token (``?token=``); its ``user_id`` and
    ``role`` claims identify the socket. Clients then send
    ``{"event": "join_parking_room", "parking_id": 7}`` or ``leave_parking_room``.
    """

    async def connect(self):
        self.user_id = None
        self.role = None
        self.rooms = set()

        query = parse_qs(self.scope.get('query_string', b'').decode())
        raw_token = (query.get('token') or [None])[0]
        if not raw_token:
            await self.close(code=UNAUTHORIZED_CLOSE_CODE)
            return

        try:
            token = await decode_access_token(raw_token)
        except TokenError as e:
            logger.warning(f"Rejected socket handshake: {str(e)}")
            await self.close(code=UNAUTHORIZED_CLOSE_CODE)
            return

        self.user_id = token.get('user_id')
        self.role = token.get('role', 'user')
        await self.accept()
        await self.send_json({'event': 'authenticated', 'user_id': self.user_id, 'role': self.role})

    async def disconnect(self, code):
        for room in list(getattr(self, 'rooms', ())):
            await self.channel_layer.group_discard(room, self.channel_name)
        self.rooms = set()

    async def receive_json(self, content, **kwargs):
        event = content.get('event') if isinstance(content, dict) else None
        parking_id = content.get('parking_id') if isinstance(content, dict) else None

        if event not in ('join_parking_room', 'leave_parking_room'):
            await self.send_json({'event': 'error', 'message': f'Unknown event: {event}'})
            return
        if parking_id is None or not str(parking_id).isdigit():
            await self.send_json({'event': 'error', 'message': 'A numeric parking_id is required'})
            return

        parking_id = int(parking_id)

        room = parking_group_name(parking_id)
        if event == 'join_parking_room':
            await self.channel_layer.group_add(room, self.channel_name)
            self.rooms.add(room)
            await self.send_json({'event': 'joined_parking_room', 'parking_id': parking_id})
        else:
            await self.channel_layer.group_discard(room, self.channel_name)
            self.rooms.discard(room)
            await self.send_json({'event': 'left_parking_room', 'parking_id': parking_id})

    async def parking_count_updated(self, event):
        await self.send_json({'event': 'parking_count_updated', 'data': event['data']})
