"""
Credit ledger: per-tenant SMS balance with an append-only transaction trail.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F

from relay.models import CreditAccount, CreditTransaction

logger = logging.getLogger(__name__)

SMS_COST = 1


def get_or_create_account(tenant_id: str) -> CreditAccount:
    """
    Returns the tenant's credit account, creating it with the free starting
    grant (and its free_signup transaction) on first use.
    """
    with transaction.atomic():
        account, created = CreditAccount.objects.get_or_create(
            tenant_id=tenant_id,
            defaults={'credits': settings.FREE_SIGNUP_CREDITS}
        )
        if created:
            CreditTransaction.objects.create(
                tenant_id=tenant_id,
                amount=settings.FREE_SIGNUP_CREDITS,
                type=CreditTransaction.Type.FREE_SIGNUP,
                description='Free credits on signup'
            )
            logger.info(f"Created credit account for tenant {tenant_id} with {account.credits} free credits")
    return account


def has_credit(tenant_id: str) -> bool:
    """Check that the tenant can pay for at least one SMS."""
    account = get_or_create_account(tenant_id)
    logger.debug(f"Tenant {tenant_id} balance: {account.credits}")
    return account.credits >= SMS_COST


def debit_for_sms(tenant_id: str, request_code: str) -> bool:
    """
    Spends one credit for a prompt SMS that the carrier accepted.

    The balance is decremented with a single conditional UPDATE so concurrent
    callers can never drive it below zero.

    Returns:
        True if the credit was taken, False if the balance was already empty
    """
    with transaction.atomic():
        updated = CreditAccount.objects.filter(
            tenant_id=tenant_id,
            credits__gte=SMS_COST
        ).update(credits=F('credits') - SMS_COST)

        if not updated:
            logger.warning(
                f"Tenant {tenant_id} had no credit left to debit for request {request_code}"
            )
            return False

        CreditTransaction.objects.create(
            tenant_id=tenant_id,
            amount=-SMS_COST,
            type=CreditTransaction.Type.USAGE,
            description=f'SMS sent for request {request_code}'
        )

    logger.info(f"Debited {SMS_COST} credit from tenant {tenant_id} for request {request_code}")
    return True
