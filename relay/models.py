"""
Data models for the SMS relay gateway.
"""
from django.db import models
from django.utils import timezone


class InfoRequest(models.Model):
    """
    One attempt to collect a piece of information from a human over SMS
    while an agent call is waiting on the answer.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        COMPLETED = 'completed', 'Completed'
        EXPIRED = 'expired', 'Expired'
        INVALID = 'invalid', 'Invalid'

    request_code = models.CharField(max_length=6, unique=True)
    call_id = models.CharField(max_length=255)
    tenant_id = models.CharField(max_length=64, db_index=True)
    recipient_phone = models.CharField(max_length=20)
    info_type = models.CharField(max_length=50, default='general')
    prompt_message = models.TextField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    received_value = models.TextField(null=True, blank=True)
    invalid_reply_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    received_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(
                fields=['tenant_id', 'recipient_phone', 'status', 'created_at'],
                name='relay_infor_tenant__7c1e2a_idx'
            ),
            models.Index(fields=['status', 'expires_at'], name='relay_infor_status_3f9b4d_idx'),
        ]

    def __str__(self):
        return f"Request {self.request_code} - {self.status}"


class SmsMessage(models.Model):
    """
    Append-only log of every inbound and outbound text.
    """

    class Direction(models.TextChoices):
        INBOUND = 'inbound', 'Inbound'
        OUTBOUND = 'outbound', 'Outbound'

    tenant_id = models.CharField(max_length=64, db_index=True)
    phone_number = models.CharField(max_length=20, db_index=True)
    message_body = models.TextField()
    direction = models.CharField(max_length=10, choices=Direction.choices)
    provider_message_sid = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    request_code = models.CharField(max_length=6, null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.direction} SMS {self.id} ({self.request_code or 'untagged'})"


class CreditAccount(models.Model):
    """
    SMS credit balance for a tenant. One credit is spent per prompt SMS.
    """

    tenant_id = models.CharField(max_length=64, unique=True)
    credits = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Credits for {self.tenant_id}: {self.credits}"


class CreditTransaction(models.Model):
    """
    Audit trail of balance changes. Rows are never edited.
    """

    class Type(models.TextChoices):
        FREE_SIGNUP = 'free_signup', 'Free signup'
        USAGE = 'usage', 'Usage'
        PURCHASE = 'purchase', 'Purchase'

    tenant_id = models.CharField(max_length=64, db_index=True)
    amount = models.IntegerField()
    type = models.CharField(max_length=20, choices=Type.choices)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} {self.amount:+d} for {self.tenant_id}"


class TenantCredentials(models.Model):
    """
    Carrier account a tenant sends from. Inbound messages are routed to the
    tenant owning the number they were sent to.
    """

    tenant_id = models.CharField(max_length=64, unique=True)
    account_sid = models.CharField(max_length=64)
    auth_token = models.CharField(max_length=128)
    phone_number = models.CharField(max_length=20, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'tenant credentials'

    def __str__(self):
        return f"Credentials for {self.tenant_id} ({self.phone_number})"
