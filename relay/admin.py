"""
Django admin configuration for relay app.
"""
from django.contrib import admin
from relay.models import (
    CreditAccount,
    CreditTransaction,
    InfoRequest,
    SmsMessage,
    TenantCredentials,
)


@admin.register(InfoRequest)
class InfoRequestAdmin(admin.ModelAdmin):
    """Admin interface for InfoRequest model."""

    list_display = ('request_code', 'tenant_id', 'call_id', 'info_type', 'status', 'created_at', 'expires_at')
    list_filter = ('status', 'info_type', 'created_at')
    search_fields = ('request_code', 'call_id', 'recipient_phone', 'tenant_id')
    readonly_fields = ('request_code', 'call_id', 'tenant_id', 'recipient_phone', 'info_type',
                       'prompt_message', 'status', 'received_value', 'invalid_reply_count',
                       'created_at', 'received_at', 'expires_at')

    fieldsets = (
        ('Status', {
            'fields': ('request_code', 'status', 'invalid_reply_count')
        }),
        ('Request', {
            'fields': ('tenant_id', 'call_id', 'recipient_phone', 'info_type', 'prompt_message')
        }),
        ('Reply', {
            'fields': ('received_value', 'received_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'expires_at')
        }),
    )

    def has_add_permission(self, request):
        """Requests are only created by the agent webhook."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SmsMessage)
class SmsMessageAdmin(admin.ModelAdmin):
    """Admin interface for SmsMessage model."""

    list_display = ('id', 'tenant_id', 'phone_number', 'direction', 'request_code', 'created_at')
    list_filter = ('direction', 'created_at')
    search_fields = ('phone_number', 'request_code', 'provider_message_sid')
    readonly_fields = ('tenant_id', 'phone_number', 'message_body', 'direction',
                       'provider_message_sid', 'request_code', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CreditAccount)
class CreditAccountAdmin(admin.ModelAdmin):
    """Admin interface for CreditAccount model."""

    list_display = ('tenant_id', 'credits', 'updated_at')
    search_fields = ('tenant_id',)
    readonly_fields = ('tenant_id', 'credits', 'created_at', 'updated_at')


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    """Admin interface for CreditTransaction model."""

    list_display = ('id', 'tenant_id', 'type', 'amount', 'description', 'created_at')
    list_filter = ('type', 'created_at')
    search_fields = ('tenant_id', 'description')
    readonly_fields = ('tenant_id', 'amount', 'type', 'description', 'created_at')

    def has_add_permission(self, request):
        """Ledger rows are written by the credit service only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TenantCredentials)
class TenantCredentialsAdmin(admin.ModelAdmin):
    """Admin interface for TenantCredentials model."""

    list_display = ('tenant_id', 'phone_number', 'account_sid', 'updated_at')
    search_fields = ('tenant_id', 'phone_number')
    readonly_fields = ('created_at', 'updated_at')
