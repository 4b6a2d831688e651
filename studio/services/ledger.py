"""
Token ledger: the only code that mutates a profile's token balance or subscription.

Every balance change is a single conditional UPDATE so concurrent requests for the
same profile can never observe (or produce) a negative or double-spent balance.
PostgreSQL re-checks the WHERE clause after waiting on a concurrent writer's row lock,
which is what makes "check and debit" one atomic step.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from studio.models.profile import Profile
from studio.core.token_rules import SUBSCRIPTION_TIERS, GENERATION_COST
from studio.core.errors import InsufficientBalance, NotFound
from studio.db.session import store_errors
from studio.utils.clock import utc_now

logger = logging.getLogger(__name__)


def get_balance(db: Session, profile_id: str) -> int:
    with store_errors(db, "get_balance"):
        balance = db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
    if balance is None:
        raise NotFound("Profile not found")
    return balance


def debit(db: Session, profile_id: str, amount: int = GENERATION_COST, commit: bool = True) -> int:
    """
    Take `amount` tokens from the profile and return the new balance.

    Raises InsufficientBalance (nothing changed) when the balance is below `amount`
    at the moment the UPDATE runs, regardless of what an earlier read returned.
    Pass commit=False to fold the debit into the caller's transaction.
    """
    if amount <= 0:
        raise ValueError("Debit amount must be positive")

    with store_errors(db, "debit"):
        updated = db.query(Profile).filter(
            Profile.id == profile_id,
            Profile.tokens >= amount
        ).update({
            Profile.tokens: Profile.tokens - amount,
            Profile.updated_at: utc_now()
        }, synchronize_session=False)

        if not updated:
            balance = db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
            if commit:
                db.rollback()
            if balance is None:
                raise NotFound("Profile not found")
            logger.info("Debit of %s rejected for profile %s (balance %s)", amount, profile_id, balance)
            raise InsufficientBalance(balance=balance, required=amount)

        balance = db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
        if commit:
            db.commit()

    logger.info("Debited %s token(s) from profile %s, balance now %s", amount, profile_id, balance)
    return balance


def credit(db: Session, profile_id: str, amount: int, commit: bool = True) -> int:
    """Add `amount` tokens to the profile and return the new balance."""
    if amount <= 0:
        raise ValueError("Credit amount must be positive")

    with store_errors(db, "credit"):
        updated = db.query(Profile).filter(
            Profile.id == profile_id
        ).update({
            Profile.tokens: Profile.tokens + amount,
            Profile.updated_at: utc_now()
        }, synchronize_session=False)

        if not updated:
            if commit:
                db.rollback()
            raise NotFound("Profile not found")

        balance = db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
        if commit:
            db.commit()

    logger.info("Credited %s token(s) to profile %s, balance now %s", amount, profile_id, balance)
    return balance


def set_subscription(db: Session, profile_id: str, tier: str, expires_at: Optional[datetime]) -> None:
    """Overwrite the subscription tier and expiry. No other validation is applied."""
    if tier not in SUBSCRIPTION_TIERS:
        raise ValueError(f"Unknown subscription tier: {tier}")

    with store_errors(db, "set_subscription"):
        updated = db.query(Profile).filter(
            Profile.id == profile_id
        ).update({
            Profile.subscription_type: tier,
            Profile.subscription_expires_at: expires_at,
            Profile.updated_at: utc_now()
        }, synchronize_session=False)

        if not updated:
            db.rollback()
            raise NotFound("Profile not found")
        db.commit()

    logger.info("Subscription for profile %s set to %s (expires %s)", profile_id, tier, expires_at)


def effective_tier(profile: Profile, now: Optional[datetime] = None) -> str:
    """
    Tier to display for the profile.
    A paid tier whose expiry has passed reads as free; the stored value is left alone.
    """
    now = now or utc_now()
    tier = profile.subscription_type or "free"
    if tier != "free" and profile.subscription_expires_at and profile.subscription_expires_at <= now:
        return "free"
    return tier
