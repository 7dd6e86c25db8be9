from itertools import count

from parking.models import ParkingLot
from parking_requests.models import ParkingRequest
from users.models import CustomUser

_sequence = count(10)


def make_user(role='user', **kwargs):
    n = next(_sequence)
    email = kwargs.pop('email', f'{role}{n}@example.com')
    defaults = {
        'username': email,
        'name': f'{role.title()} {n}',
        'phone_number': f'+9198765{n:05d}',
        'role': role,
    }
    defaults.update(kwargs)
    return CustomUser.objects.create_user(email=email, password='secret123', **defaults)


def make_parking(owner, **kwargs):
    defaults = {
        'name': 'Connaught Place Parking',
        'latitude': 0.0,
        'longitude': 0.0,
        'city': 'Delhi',
        'capacity_car': 10,
        'capacity_bike': 5,
    }
    defaults.update(kwargs)
    return ParkingLot.objects.create(owner=owner, **defaults)


def make_request(user, request_type='new_parking_site', **kwargs):
    defaults = {
        'title': 'Empty lot behind the market',
        'description': 'Large open ground used for parking on weekends',
        'latitude': 28.6139,
        'longitude': 77.2090,
        'city': 'Delhi',
    }
    if request_type == 'new_parking_site':
        defaults['parking_details'] = {
            'name': 'Market Ground Parking',
            'capacity': {'car': 40, 'bike': 60, 'bus_truck': 0},
            'parking_type': 'opensky',
            'payment_type': 'paid',
            'ownership_type': 'public',
            'hourly_rate': {'car': '20.00', 'bike': '10.00', 'bus_truck': '0'},
        }
    else:
        defaults['no_parking_details'] = {'reason': 'Blocks the school gate'}
    defaults.update(kwargs)
    return ParkingRequest.objects.create(user=user, request_type=request_type, **defaults)
