"""Subscription summary aggregation"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List

from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.subscription import SubscriptionWithPlan


@dataclass
class UpcomingPayment:
    plan: SubscriptionPlan
    amount: Decimal
    due_date: datetime


@dataclass
class SubscriptionSummary:
    total_due: Decimal = Decimal("0")
    total_subscriptions: int = 0
    active_subscriptions: List[SubscriptionWithPlan] = field(default_factory=list)
    upcoming_payments: List[UpcomingPayment] = field(default_factory=list)


def summarize_subscriptions(subscriptions: Iterable[SubscriptionWithPlan]) -> SubscriptionSummary:
    """
    Fold a user's active subscriptions into totals

    Each subscription contributes ``plan.price * startup_count`` and one
    upcoming payment due at ``current_period_end``. Payments keep the input
    order; callers needing chronological order must sort them.
    """
    summary = SubscriptionSummary()

    for subscription in subscriptions:
        amount = Decimal(subscription.plan.price) * subscription.startup_count
        summary.total_due += amount
        summary.total_subscriptions += 1
        summary.active_subscriptions.append(subscription)
        summary.upcoming_payments.append(
            UpcomingPayment(
                plan=subscription.plan,
                amount=amount,
                due_date=subscription.current_period_end,
            )
        )

    return summary
