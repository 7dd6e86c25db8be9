# ==================== USERS/SERVICES.PY ====================
import logging

from django.db import transaction
from django.db.models import F
from rest_framework.exceptions import NotFound, ValidationError

from utils.exceptions import InsufficientBalance
from .models import CustomUser, WalletTransaction

logger = logging.getLogger(__name__)


class WalletService:
    """Coin ledger: every balance change is one conditional UPDATE plus one appended entry"""

    @staticmethod
    def _validate_amount(amount):
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError({'amount': 'Amount must be a positive integer'})

    @staticmethod
    def _user_id(user):
        return user.pk if isinstance(user, CustomUser) else user

    @staticmethod
    def _append(user_id, transaction_type, amount, description):
        balance = CustomUser.objects.filter(pk=user_id).values_list('coins', flat=True).get()
        return WalletTransaction.objects.create(
            user_id=user_id,
            transaction_type=transaction_type,
            amount=amount,
            description=description,
            balance_after=balance,
        )

    @staticmethod
    def credit(user, amount, description):
        """Add coins to a wallet and record the credit"""
        WalletService._validate_amount(amount)
        user_id = WalletService._user_id(user)

        with transaction.atomic():
            updated = CustomUser.objects.filter(pk=user_id).update(coins=F('coins') + amount)
            if not updated:
                raise NotFound('User not found')
            entry = WalletService._append(user_id, 'credit', amount, description)

        if isinstance(user, CustomUser):
            user.coins = entry.balance_after
        logger.info(f"Credited {amount} coins to user {user_id}: {description}")
        return entry

    @staticmethod
    def debit(user, amount, description):
        """Remove coins from a wallet; never lets the balance go negative"""
        WalletService._validate_amount(amount)
        user_id = WalletService._user_id(user)

        with transaction.atomic():
            updated = CustomUser.objects.filter(
                pk=user_id,
                coins__gte=amount
            ).update(coins=F('coins') - amount)

            if not updated:
                if not CustomUser.objects.filter(pk=user_id).exists():
                    raise NotFound('User not found')
                logger.warning(f"Debit of {amount} coins rejected for user {user_id}: insufficient balance")
                raise InsufficientBalance()

            entry = WalletService._append(user_id, 'debit', amount, description)

        if isinstance(user, CustomUser):
            user.coins = entry.balance_after
        logger.info(f"Debited {amount} coins from user {user_id}: {description}")
        return entry

    @staticmethod
    def get_balance(user):
        return CustomUser.objects.values_list('coins', flat=True).get(pk=WalletService._user_id(user))

    @staticmethod
    def history(user):
        """Ledger entries, oldest first"""
        return WalletTransaction.objects.filter(user_id=WalletService._user_id(user)).order_by('timestamp', 'id')
