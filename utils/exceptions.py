# ==================== UTILS/EXCEPTIONS.PY ====================
from rest_framework.exceptions import APIException
from rest_framework import status


class InvalidLocation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Missing or invalid coordinates.'
    default_code = 'invalid_location'


class OutOfRange(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'You are too far from the parking to check in.'
    default_code = 'out_of_range'


class LotUnavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Parking is inactive or full.'
    default_code = 'lot_unavailable'


class CheckInCooldown(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'You already checked in at this parking recently.'
    default_code = 'checkin_cooldown'


class InsufficientBalance(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Insufficient coins.'
    default_code = 'insufficient_balance'


class InvalidTransition(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request has already been reviewed.'
    default_code = 'invalid_transition'


class OccupancyOutOfBounds(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Vehicle count would leave the allowed range.'
    default_code = 'occupancy_out_of_bounds'
