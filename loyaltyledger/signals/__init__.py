"""
Loyalty ledger signals — public event API.

Event signals are sent on commit, so receivers (wallet-pass refresh, push
notifications) never observe rolled-back state. rewards_expired is sent right
after the sweep UPDATE.

Emitted signals:
- stamps_recorded: services.stamps.record_stamp_event()
- rewards_unlocked: services.stamps.record_stamp_event(), when rewards became available
- reward_redeemed: services.redemption.redeem_reward()
- tier_upgraded: services.points.record_purchase_event()
- benefit_redeemed: services.redemption.redeem_benefit()
- rewards_expired: services.expiration.sweep_expired()
"""

from django.dispatch import Signal

stamps_recorded = Signal()  # sender=Customer, customer, result
rewards_unlocked = Signal()  # sender=Customer, customer, rewards=list[StampReward]
reward_redeemed = Signal()  # sender=RewardInstance, instance
tier_upgraded = Signal()  # sender=Customer, customer, upgrade=TierUpgrade
benefit_redeemed = Signal()  # sender=CustomerBenefit, benefit
rewards_expired = Signal()  # sender=RewardInstance, count
