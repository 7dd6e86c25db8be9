from django.test import TestCase
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIClient

from users.models import WalletTransaction
from users.services import WalletService
from utils.exceptions import InsufficientBalance
from .helpers import make_user


class WalletServiceTests(TestCase):

    def setUp(self):
        self.user = make_user()

    def test_credit_appends_entry(self):
        entry = WalletService.credit(self.user, 25, 'Welcome bonus')
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 25)
        self.assertEqual(entry.transaction_type, 'credit')
        self.assertEqual(entry.balance_after, 25)

    def test_debit_above_balance_changes_nothing(self):
        WalletService.credit(self.user, 5, 'Check-in')
        with self.assertRaises(InsufficientBalance):
            WalletService.debit(self.user, 6, 'Redeem')
        self.user.refresh_from_db()
        self.assertEqual(self.user.coins, 5)
        self.assertEqual(WalletTransaction.objects.filter(user=self.user).count(), 1)

    def test_credit_then_debit_restores_balance(self):
        WalletService.credit(self.user, 10, 'Seed')
        WalletService.credit(self.user, 40, 'Reward')
        WalletService.debit(self.user, 40, 'Redeem')
        self.assertEqual(WalletService.get_balance(self.user), 10)
        history = list(WalletService.history(self.user))
        self.assertEqual(len(history), 3)
        self.assertEqual([t.transaction_type for t in history[1:]], ['credit', 'debit'])
        self.assertEqual([t.balance_after for t in history], [10, 50, 10])

    def test_amount_must_be_positive_integer(self):
        for amount in (0, -3, 1.5, True, '10'):
            with self.assertRaises(ValidationError):
                WalletService.credit(self.user, amount, 'Bad')
        self.assertEqual(WalletService.get_balance(self.user), 0)

    def test_unknown_user(self):
        with self.assertRaises(NotFound):
            WalletService.credit(999999, 5, 'Nobody')
        with self.assertRaises(NotFound):
            WalletService.debit(999999, 5, 'Nobody')


class WalletEndpointTests(TestCase):

    def setUp(self):
        self.user = make_user()
        self.client = APIClient()
        self.client.force_authenticate(self.user)
        for i in range(1, 6):
            WalletService.credit(self.user, i, f'Credit {i}')

    def test_wallet_returns_balance_and_history_oldest_first(self):
        response = self.client.get('/api/users/wallet/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['coins'], 15)
        self.assertEqual([t['amount'] for t in response.data['transactions']], [1, 2, 3, 4, 5])

    def test_paginated_history(self):
        response = self.client.get('/api/users/wallet/transactions/', {'page': 2, 'limit': 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([t['amount'] for t in response.data['results']], [3, 4])
        self.assertEqual(response.data['pagination'], {'page': 2, 'limit': 2, 'total': 5, 'pages': 3})

    def test_wallet_requires_authentication(self):
        response = APIClient().get('/api/users/wallet/')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data['success'])
