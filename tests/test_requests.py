from decimal import Decimal

from django.core import mail
from django.test import TestCase
from rest_framework.test import APIClient

from parking.models import ParkingLot
from parking_requests.models import ParkingRequest
from parking_requests.serializers import ParkingRequestSerializer
from parking_requests.services import RequestWorkflowService
from users.models import WalletTransaction
from utils.exceptions import InvalidTransition
from .helpers import make_user, make_request


class RequestWorkflowServiceTests(TestCase):

    def setUp(self):
        self.admin = make_user(role='admin')
        self.user = make_user()

    def test_approve_new_site_creates_parking_and_rewards(self):
        parking_request = make_request(self.user)
        with self.captureOnCommitCallbacks(execute=True):
            approved = RequestWorkflowService.approve(parking_request.pk, self.admin, 50, 'Looks good')

        self.assertEqual(approved.status, 'approved')
        self.assertEqual(approved.reviewed_by, self.admin)
        self.assertIsNotNone(approved.reviewed_at)
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 50)

        parking = approved.created_parking
        self.assertEqual(parking.owner, self.user)
        self.assertEqual((parking.capacity_car, parking.capacity_bike, parking.capacity_bus_truck), (40, 60, 0))
        self.assertEqual(parking.hourly_rate_car, Decimal('20.00'))
        self.assertTrue(parking.is_active and parking.is_approved)
        self.assertEqual((parking.latitude, parking.longitude), (28.6139, 77.2090))

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('approved', mail.outbox[0].subject.lower())
        self.assertEqual(mail.outbox[0].to, [self.user.email])

    def test_approve_no_parking_zone_creates_no_parking(self):
        parking_request = make_request(self.user, request_type='no_parking_zone')
        approved = RequestWorkflowService.approve(parking_request.pk, self.admin, 0)
        self.assertIsNone(approved.created_parking)
        self.assertFalse(ParkingLot.objects.exists())
        self.assertFalse(WalletTransaction.objects.exists())

    def test_deny_has_no_wallet_effect(self):
        parking_request = make_request(self.user)
        with self.captureOnCommitCallbacks(execute=True):
            denied = RequestWorkflowService.deny(parking_request.pk, self.admin, 'Private property')
        self.assertEqual(denied.status, 'denied')
        self.assertEqual(denied.admin_notes, 'Private property')
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 0)
        self.assertFalse(ParkingLot.objects.exists())
        self.assertEqual(len(mail.outbox), 1)

    def test_decided_requests_cannot_transition(self):
        approved = make_request(self.user)
        RequestWorkflowService.approve(approved.pk, self.admin, 10)
        denied = make_request(self.user)
        RequestWorkflowService.deny(denied.pk, self.admin)

        for parking_request in (approved, denied):
            with self.assertRaises(InvalidTransition):
                RequestWorkflowService.approve(parking_request.pk, self.admin, 10)
            with self.assertRaises(InvalidTransition):
                RequestWorkflowService.deny(parking_request.pk, self.admin)

        approved.refresh_from_db()
        denied.refresh_from_db()
        self.assertEqual((approved.status, denied.status), ('approved', 'denied'))
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 10)
        self.assertEqual(ParkingLot.objects.count(), 1)

    def test_edit_from_stale_copy_cannot_reopen_approved_request(self):
        parking_request = make_request(self.user)
        stale = ParkingRequest.objects.get(pk=parking_request.pk)
        RequestWorkflowService.approve(parking_request.pk, self.admin, coins_awarded=50)

        serializer = ParkingRequestSerializer(stale, data={'title': 'Edited'}, partial=True)
        serializer.is_valid(raise_exception=True)
        with self.assertRaises(InvalidTransition):
            serializer.save()

        parking_request.refresh_from_db()
        self.assertEqual(parking_request.status, 'approved')
        self.assertNotEqual(parking_request.title, 'Edited')
        self.assertEqual(parking_request.coins_awarded, 50)
        with self.assertRaises(InvalidTransition):
            RequestWorkflowService.approve(parking_request.pk, self.admin, coins_awarded=50)
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 50)
        self.assertEqual(ParkingLot.objects.count(), 1)

    def test_pending_edit_keeps_review_columns(self):
        parking_request = make_request(self.user)
        serializer = ParkingRequestSerializer(parking_request, data={'title': 'Edited'}, partial=True)
        serializer.is_valid(raise_exception=True)
        edited = serializer.save()

        self.assertEqual((edited.title, edited.status), ('Edited', 'pending'))
        self.assertEqual(edited.parking_details['capacity']['car'], 40)


class RequestEndpointTests(TestCase):

    def setUp(self):
        self.admin = make_user(role='admin')
        self.user = make_user()
        self.client = APIClient()

    def submit(self, **overrides):
        payload = {
            'request_type': 'new_parking_site',
            'title': 'Empty lot near the metro',
            'description': 'Unused ground next to exit 2',
            'location': {
                'type': 'Point',
                'coordinates': [77.2090, 28.6139],
                'address': {'city': 'Delhi', 'street': 'Janpath'},
            },
            'parking_details': {
                'name': 'Metro Exit Parking',
                'capacity': {'car': 20, 'bike': 30},
                'payment_type': 'paid',
                'hourly_rate': {'car': '30.00'},
            },
        }
        payload.update(overrides)
        return self.client.post('/api/requests/', payload, format='json')

    def test_submit(self):
        self.client.force_authenticate(self.user)
        response = self.submit()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['location']['coordinates'], [77.2090, 28.6139])
        self.assertEqual(response.data['parking_details']['capacity'], {'car': 20, 'bike': 30, 'bus_truck': 0})
        parking_request = ParkingRequest.objects.get()
        self.assertEqual(parking_request.user, self.user)
        self.assertEqual(parking_request.city, 'Delhi')

    def test_submit_ignores_status_from_client(self):
        self.client.force_authenticate(self.user)
        response = self.submit(status='approved', coins_awarded=500)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['coins_awarded'], 0)

    def test_new_site_requires_details(self):
        self.client.force_authenticate(self.user)
        response = self.submit(parking_details=None)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'validation_error')
        self.assertIn('parking_details', response.data['errors'])

    def test_no_parking_zone_submission(self):
        self.client.force_authenticate(self.user)
        response = self.submit(request_type='no_parking_zone', no_parking_details={'reason': 'Fire lane'})
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.data['parking_details'])
        self.assertEqual(response.data['no_parking_details'], {'reason': 'Fire lane'})

    def test_submit_requires_authentication(self):
        self.assertEqual(self.submit().status_code, 401)

    def test_end_to_end_approval(self):
        self.client.force_authenticate(self.user)
        request_id = self.submit().data['id']

        self.client.force_authenticate(self.admin)
        response = self.client.put(f'/api/requests/{request_id}/approve/',
                                   {'coinsAwarded': 50, 'adminNotes': 'Verified on site'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['request']['status'], 'approved')
        self.assertEqual(response.data['request']['coins_awarded'], 50)

        self.client.force_authenticate(self.user)
        wallet = self.client.get('/api/users/wallet/').data
        self.assertEqual(wallet['coins'], 50)

        parking = ParkingLot.objects.get(pk=response.data['request']['created_parking'])
        self.assertEqual(parking.owner, self.user)
        self.assertEqual((parking.capacity_car, parking.capacity_bike), (20, 30))

        response = self.client.get(f'/api/parkings/{parking.pk}/')
        self.assertEqual(response.status_code, 200)

        self.client.force_authenticate(self.admin)
        response = self.client.put(f'/api/requests/{request_id}/deny/', {}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'invalid_transition')

    def test_only_admins_review(self):
        parking_request = make_request(self.user)
        self.client.force_authenticate(self.user)
        response = self.client.put(f'/api/requests/{parking_request.pk}/approve/', {'coins_awarded': 50},
                                   format='json')
        self.assertEqual(response.status_code, 403)
        parking_request.refresh_from_db()
        self.assertEqual(parking_request.status, 'pending')

    def test_review_unknown_request(self):
        self.client.force_authenticate(self.admin)
        response = self.client.put('/api/requests/999999/deny/', {}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_negative_coins_rejected(self):
        parking_request = make_request(self.user)
        self.client.force_authenticate(self.admin)
        response = self.client.put(f'/api/requests/{parking_request.pk}/approve/', {'coins_awarded': -5},
                                   format='json')
        self.assertEqual(response.status_code, 400)

    def test_approved_list_is_public(self):
        approved = make_request(self.user)
        RequestWorkflowService.approve(approved.pk, self.admin)
        make_request(self.user)

        response = APIClient().get('/api/requests/approved/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['id'] for r in response.data['results']], [approved.pk])

    def test_my_requests(self):
        mine = make_request(self.user)
        make_request(make_user())
        denied = make_request(self.user)
        RequestWorkflowService.deny(denied.pk, self.admin)

        self.client.force_authenticate(self.user)
        response = self.client.get('/api/requests/user/me/')
        self.assertEqual({r['id'] for r in response.data['results']}, {mine.pk, denied.pk})
        response = self.client.get('/api/requests/user/me/', {'status': 'denied'})
        self.assertEqual([r['id'] for r in response.data['results']], [denied.pk])

    def test_admin_listings(self):
        pending = make_request(self.user)
        denied = make_request(self.user, request_type='no_parking_zone')
        RequestWorkflowService.deny(denied.pk, self.admin)

        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.get('/api/requests/').status_code, 403)
        self.assertEqual(self.client.get('/api/requests/pending/').status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/requests/pending/')
        self.assertEqual([r['id'] for r in response.data['results']], [pending.pk])
        response = self.client.get('/api/requests/', {'request_type': 'no_parking_zone'})
        self.assertEqual([r['id'] for r in response.data['results']], [denied.pk])
        response = self.client.get('/api/requests/', {'status': 'pending'})
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_statistics(self):
        approved = make_request(self.user)
        RequestWorkflowService.approve(approved.pk, self.admin, 30)
        make_request(self.user, request_type='no_parking_zone')

        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/requests/statistics/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['by_status'], {'pending': 1, 'approved': 1, 'denied': 0})
        self.assertEqual(response.data['by_type'], {'new_parking_site': 1, 'no_parking_zone': 1})
        self.assertEqual(response.data['total_coins_awarded'], 30)
        self.assertEqual(response.data['last_7_days'], 2)

    def test_submitter_edits_and_withdraws_while_pending(self):
        parking_request = make_request(self.user)
        self.client.force_authenticate(self.user)
        response = self.client.patch(f'/api/requests/{parking_request.pk}/', {'title': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['title'], 'Renamed')

        response = self.client.delete(f'/api/requests/{parking_request.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(ParkingRequest.objects.exists())

    def test_decided_request_is_locked_for_submitter(self):
        parking_request = make_request(self.user)
        RequestWorkflowService.deny(parking_request.pk, self.admin)
        self.client.force_authenticate(self.user)
        response = self.client.patch(f'/api/requests/{parking_request.pk}/', {'title': 'Again'}, format='json')
        self.assertEqual(response.data['error'], 'invalid_transition')
        response = self.client.delete(f'/api/requests/{parking_request.pk}/')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(ParkingRequest.objects.exists())

    def test_other_users_cannot_see_request(self):
        parking_request = make_request(self.user)
        self.client.force_authenticate(make_user())
        response = self.client.get(f'/api/requests/{parking_request.pk}/')
        self.assertEqual(response.status_code, 403)

    def test_request_type_cannot_change(self):
        parking_request = make_request(self.user)
        self.client.force_authenticate(self.user)
        response = self.client.patch(f'/api/requests/{parking_request.pk}/',
                                     {'request_type': 'no_parking_zone'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_nearby_requests(self):
        near = make_request(self.user, latitude=28.6140, longitude=77.2091)
        make_request(self.user, latitude=19.0760, longitude=72.8777)
        self.client.force_authenticate(self.user)
        response = self.client.get('/api/requests/nearby/', {'coordinates': '77.2090,28.6139', 'maxDistance': 1000})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['id'] for r in response.data['results']], [near.pk])
        self.assertLess(response.data['results'][0]['distance'], 100)
