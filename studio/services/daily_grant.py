"""
Free daily token grant.

A profile may claim DAILY_GRANT_TOKENS once every rolling 24 hours. Eligibility is
elapsed time since the last claim, not a calendar-day rollover: claiming at 23:00
and again at 22:00 the next day is refused, claiming exactly 24h later is allowed.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from studio.models.profile import Profile
from studio.core.token_rules import DAILY_GRANT_TOKENS, DAILY_CLAIM_INTERVAL
from studio.core.errors import NotEligible, NotFound
from studio.db.session import store_errors
from studio.utils.clock import utc_now

logger = logging.getLogger(__name__)


def is_eligible(last_claimed_at: Optional[datetime], now: datetime) -> bool:
    if last_claimed_at is None:
        return True
    return now - last_claimed_at >= DAILY_CLAIM_INTERVAL


def daily_claim_status(profile: Profile, now: Optional[datetime] = None) -> dict:
    """Eligibility snapshot for display. Claiming still re-checks in the database."""
    now = now or utc_now()
    last_claimed_at = profile.last_daily_token_claim
    return {
        "can_claim": is_eligible(last_claimed_at, now),
        "grant_tokens": DAILY_GRANT_TOKENS,
        "last_claimed_at": last_claimed_at,
        "next_claim_at": last_claimed_at + DAILY_CLAIM_INTERVAL if last_claimed_at else None,
    }


def claim_daily(db: Session, profile_id: str, now: Optional[datetime] = None) -> tuple[int, datetime]:
    """
    Credit the daily grant and stamp the claim time in one UPDATE.

    The eligibility test lives in the WHERE clause, so the credit and the new
    timestamp land together and two concurrent claims cannot both match.

    Returns:
        (new_balance, next_claim_at)

    Raises:
        NotEligible: the 24h window has not elapsed (carries next_claim_at)
        NotFound: no such profile
    """
    now = now or utc_now()
    cutoff = now - DAILY_CLAIM_INTERVAL

    with store_errors(db, "claim_daily"):
        updated = db.query(Profile).filter(
            Profile.id == profile_id,
            or_(
                Profile.last_daily_token_claim.is_(None),
                Profile.last_daily_token_claim <= cutoff
            )
        ).update({
            Profile.tokens: Profile.tokens + DAILY_GRANT_TOKENS,
            Profile.last_daily_token_claim: now,
            Profile.updated_at: now
        }, synchronize_session=False)

        if not updated:
            row = db.query(Profile.last_daily_token_claim).filter(Profile.id == profile_id).first()
            db.rollback()
            if row is None:
                raise NotFound("Profile not found")
            next_claim_at = row[0] + DAILY_CLAIM_INTERVAL if row[0] else None
            logger.info("Daily claim refused for profile %s, next claim at %s", profile_id, next_claim_at)
            raise NotEligible(next_claim_at=next_claim_at)

        balance = db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
        db.commit()

    logger.info("Daily grant of %s tokens claimed by profile %s, balance now %s", DAILY_GRANT_TOKENS, profile_id, balance)
    return balance, now + DAILY_CLAIM_INTERVAL
