"""Expiration sweeper."""

import logging

from django.utils import timezone

from loyaltyledger.models import RewardInstance, RewardStatus
from loyaltyledger.signals import rewards_expired

logger = logging.getLogger(__name__)


def sweep_expired(now=None) -> int:
    """
    Mark every non-redeemed instance past its expiry date as ``expired``.

    A single set-based UPDATE filtered on ``status != redeemed``: redeemed
    rows are never touched and a concurrent redemption wins. Safe to run at
    any cadence.

    Returns:
        Number of rows matched (already-expired rows included)
    """
    now = now or timezone.now()
    count = (
        RewardInstance.objects
        .filter(expires_at__lt=now)
        .exclude(status=RewardStatus.REDEEMED)
        .update(status=RewardStatus.EXPIRED)
    )
    if count:
        logger.info("Marked %d reward instance(s) as expired", count)
        rewards_expired.send(sender=RewardInstance, count=count)
    return count
