from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from users.models import CustomUser, WalletTransaction
from users.serializers import UserProfileSerializer
from users.services import WalletService
from .helpers import make_user


class AuthTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def register(self, **overrides):
        payload = {
            'name': 'Asha Rao',
            'email': 'Asha@Example.com',
            'phone_number': '+919812345678',
            'password': 'parking123',
        }
        payload.update(overrides)
        return self.client.post('/api/users/register/', payload, format='json')

    def test_register_returns_tokens_with_role_claim(self):
        response = self.register()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['user']['email'], 'asha@example.com')
        self.assertEqual(response.data['user']['role'], 'user')
        self.assertEqual(response.data['user']['coins'], 0)
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], 'user')
        self.assertEqual(str(token['user_id']), str(CustomUser.objects.get().pk))

    def test_register_cannot_choose_role(self):
        response = self.register(role='admin')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(CustomUser.objects.get().role, 'user')

    def test_duplicate_email(self):
        self.register()
        response = self.register(phone_number='+919812345679', email='asha@example.com')
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.data['errors'])

    def test_short_password(self):
        response = self.register(password='12345')
        self.assertEqual(response.status_code, 400)

    def test_login(self):
        self.register()
        response = self.client.post('/api/users/login/', {'email': 'asha@example.com', 'password': 'parking123'},
                                    format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)
        self.assertIsNotNone(CustomUser.objects.get().last_login)

    def test_login_bad_password(self):
        self.register()
        response = self.client.post('/api/users/login/', {'email': 'asha@example.com', 'password': 'nope'},
                                    format='json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])

    def test_bearer_token_authenticates(self):
        access = self.register().data['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        response = self.client.get('/api/users/profile/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['name'], 'Asha Rao')

    def test_invalid_token_is_401(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get('/api/users/profile/')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data['success'])

    def test_logout_blacklists_refresh_token(self):
        tokens = self.register().data
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = self.client.post('/api/users/logout/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, 200)

        response = self.client.post('/api/users/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, 401)


class ProfileTests(TestCase):

    def setUp(self):
        self.user = make_user()
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def test_update_location(self):
        response = self.client.put('/api/users/profile/', {'latitude': 28.6, 'longitude': 77.2}, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual((self.user.latitude, self.user.longitude), (28.6, 77.2))
        self.assertIsNotNone(self.user.location_updated_at)

    def test_invalid_location(self):
        response = self.client.put('/api/users/profile/', {'latitude': 95, 'longitude': 77.2}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_coins_and_role_are_read_only(self):
        self.client.put('/api/users/profile/', {'coins': 1000, 'role': 'admin'}, format='json')
        self.user.refresh_from_db()
        self.assertEqual((self.user.coins, self.user.role), (0, 'user'))

    def test_profile_save_keeps_concurrent_credit(self):
        stale = CustomUser.objects.get(pk=self.user.pk)
        WalletService.credit(self.user.pk, 50, 'Check-in reward')

        serializer = UserProfileSerializer(stale, data={'name': 'New'}, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'New')
        self.assertEqual(self.user.coins, 50)
        self.assertEqual(WalletTransaction.objects.get(user=self.user).balance_after, self.user.coins)


class DeactivateTests(TestCase):

    def test_admin_deactivates_user(self):
        admin = make_user(role='admin')
        user = make_user()
        client = APIClient()
        client.force_authenticate(admin)
        response = client.post(f'/api/users/{user.pk}/deactivate/')
        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertFalse(user.is_active)

    def test_non_admin_forbidden(self):
        user = make_user()
        client = APIClient()
        client.force_authenticate(make_user())
        response = client.post(f'/api/users/{user.pk}/deactivate/')
        self.assertEqual(response.status_code, 403)


class UserPermissionTests(TestCase):

    def test_account_routes_require_authentication(self):
        client = APIClient()
        user = make_user()
        for method, url in [('post', '/api/users/logout/'), ('get', '/api/users/profile/'),
                            ('put', '/api/users/profile/'), ('get', '/api/users/wallet/'),
                            ('get', '/api/users/wallet/transactions/'),
                            ('post', f'/api/users/{user.pk}/deactivate/')]:
            response = getattr(client, method)(url, {}, format='json')
            self.assertEqual(response.status_code, 401, url)

    def test_register_and_login_are_open(self):
        client = APIClient()
        response = client.post('/api/users/login/', {'email': 'nobody@example.com', 'password': 'wrong'},
                               format='json')
        self.assertEqual(response.status_code, 400)
        response = client.post('/api/users/register/', {}, format='json')
        self.assertEqual(response.status_code, 400)
