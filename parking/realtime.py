# ==================== PARKING/REALTIME.PY ====================
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def parking_group_name(parking_id):
    return f"parking_{parking_id}"


def broadcast_count_update(parking, vehicle_class):
    """Best-effort, at-most-once fan-out of an occupancy change to the lot's room"""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False

    try:
        async_to_sync(channel_layer.group_send)(
            parking_group_name(parking.pk),
            {
                'type': 'parking.count_updated',
                'data': parking.occupancy_snapshot(vehicle_class),
            }
        )
    except Exception as e:
        logger.error(f"Error broadcasting count update for parking {parking.pk}: {str(e)}")
        return False
    return True
