# ==================== USERS/ADMIN.PY ====================
from django.contrib import admin
from .models import CustomUser, WalletTransaction


class WalletTransactionInline(admin.TabularInline):
    model = WalletTransaction
    extra = 0
    can_delete = False
    readonly_fields = ['transaction_type', 'amount', 'description', 'balance_after', 'timestamp']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ['email', 'name', 'phone_number', 'role', 'coins', 'is_active', 'created_at']
    list_filter = ['role', 'is_active', 'created_at']
    search_fields = ['email', 'name', 'phone_number']
    readonly_fields = ['coins', 'created_at', 'updated_at', 'last_login']
    inlines = [WalletTransactionInline]


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ['user', 'transaction_type', 'amount', 'balance_after', 'timestamp']
    list_filter = ['transaction_type', 'timestamp']
    search_fields = ['user__email', 'description']
    readonly_fields = ['user', 'transaction_type', 'amount', 'description', 'balance_after', 'timestamp']
