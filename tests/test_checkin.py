from unittest import mock

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from users.models import WalletTransaction
from visits.models import Visit
from visits.services import CheckInService
from .helpers import make_user, make_parking


class CheckInTests(TestCase):

    def setUp(self):
        self.owner = make_user(role='owner')
        self.user = make_user()
        self.parking = make_parking(self.owner)
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def check_in(self, longitude, latitude, parking=None):
        return self.client.post('/api/visits/', {
            'parking_id': (parking or self.parking).pk,
            'location': {'type': 'Point', 'coordinates': [longitude, latitude]},
        }, format='json')

    def test_inside_geofence_earns_reward(self):
        response = self.check_in(0.004, 0)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['coins'], 10)
        self.assertAlmostEqual(response.data['visit']['distance'], 444.8, delta=0.5)

        visit = Visit.objects.get(user=self.user)
        self.assertTrue(visit.is_verified)
        self.assertEqual(visit.coins_earned, 10)
        entry = WalletTransaction.objects.get(user=self.user)
        self.assertEqual((entry.transaction_type, entry.amount, entry.balance_after), ('credit', 10, 10))

        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 10)
        self.assertEqual(self.user.longitude, 0.004)

    def test_outside_geofence_rejected(self):
        response = self.check_in(0.0045, 0)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'out_of_range')
        self.assertFalse(Visit.objects.exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 0)

    def test_invalid_coordinates(self):
        response = self.check_in(200, 0)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'invalid_location')

        response = self.client.post('/api/visits/', {'parking_id': self.parking.pk}, format='json')
        self.assertEqual(response.data['error'], 'invalid_location')

    def test_flat_coordinates_accepted(self):
        response = self.client.post('/api/visits/', {
            'parking_id': self.parking.pk, 'longitude': 0.001, 'latitude': 0.001,
        }, format='json')
        self.assertEqual(response.status_code, 201)

    def test_unknown_parking(self):
        response = self.client.post('/api/visits/', {
            'parking_id': 999999, 'location': {'coordinates': [0, 0]},
        }, format='json')
        self.assertEqual(response.status_code, 404)

    def test_inactive_parking_rejected(self):
        self.parking.is_active = False
        self.parking.save()
        response = self.check_in(0, 0)
        self.assertEqual(response.data['error'], 'lot_unavailable')

    def test_full_parking_rejected(self):
        self.parking.current_car = self.parking.capacity_car
        self.parking.save()
        response = self.check_in(0, 0)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'lot_unavailable')

    def test_check_in_does_not_change_occupancy(self):
        self.check_in(0, 0)
        self.parking.refresh_from_db()
        self.assertEqual(self.parking.current_car, 0)

    def test_repeat_check_ins_allowed_without_cooldown(self):
        self.assertEqual(self.check_in(0, 0).status_code, 201)
        response = self.check_in(0, 0)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['coins'], 20)

    @override_settings(CHECKIN_COOLDOWN_MINUTES=60)
    def test_cooldown(self):
        self.assertEqual(self.check_in(0, 0).status_code, 201)
        response = self.check_in(0, 0)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'checkin_cooldown')
        self.assertEqual(Visit.objects.count(), 1)

    @override_settings(CHECKIN_COOLDOWN_MINUTES=60)
    def test_cooldown_checked_under_user_lock(self):
        calls = mock.Mock()
        lock = mock.patch.object(CheckInService, '_lock_user', wraps=CheckInService._lock_user)
        cooldown = mock.patch.object(CheckInService, '_check_cooldown', wraps=CheckInService._check_cooldown)
        with lock as locked, cooldown as checked:
            calls.attach_mock(locked, 'lock')
            calls.attach_mock(checked, 'cooldown')
            self.assertEqual(self.check_in(0, 0).status_code, 201)
            self.assertEqual(self.check_in(0, 0).status_code, 400)

        self.assertEqual([c[0] for c in calls.mock_calls], ['lock', 'cooldown', 'lock', 'cooldown'])
        self.assertEqual(Visit.objects.count(), 1)
        self.assertEqual(WalletTransaction.objects.filter(user=self.user).count(), 1)

    def test_requires_authentication(self):
        response = APIClient().post('/api/visits/', {'parking_id': self.parking.pk}, format='json')
        self.assertEqual(response.status_code, 401)

    def test_my_visits(self):
        self.check_in(0, 0)
        other = make_user()
        other_client = APIClient()
        other_client.force_authenticate(other)
        other_client.post('/api/visits/', {'parking_id': self.parking.pk, 'longitude': 0, 'latitude': 0},
                          format='json')

        response = self.client.get('/api/visits/user/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['results'][0]['parking']['id'], self.parking.pk)
