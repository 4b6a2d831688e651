"""
Promo code redemption and promo code administration.

A redemption consumes one use of a shared code and credits its token value to the
redeeming profile. Both writes share one transaction, and the use is taken with a
conditional UPDATE so concurrent redeemers can never push current_uses past max_uses.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from studio.models.promo_code import PromoCode
from studio.core.errors import CodeNotFound, UsageLimitReached, CodeExpired, StudioError
from studio.db.session import store_errors
from studio.services import ledger
from studio.utils.clock import utc_now

logger = logging.getLogger(__name__)


def normalize_code(code_text: Optional[str]) -> str:
    return (code_text or "").strip().upper()


def _find_active_code(db: Session, code: str) -> Optional[PromoCode]:
    return db.query(PromoCode).filter(
        PromoCode.code == code,
        PromoCode.active.is_(True)
    ).first()


def _check_redeemable(promo: Optional[PromoCode], now: datetime) -> None:
    """Checks in user-facing order: unknown/inactive, used up, expired."""
    if promo is None or not promo.active:
        raise CodeNotFound()
    if promo.current_uses >= promo.max_uses:
        raise UsageLimitReached()
    if promo.expires_at is not None and now > promo.expires_at:
        raise CodeExpired()


def redeem(db: Session, profile_id: str, code_text: str, now: Optional[datetime] = None) -> tuple[int, int]:
    """
    Redeem a promo code for the profile.

    Returns:
        (tokens_granted, new_balance)

    Raises:
        CodeNotFound, UsageLimitReached, CodeExpired, NotFound (profile)
    """
    now = now or utc_now()
    code = normalize_code(code_text)
    if not code:
        raise CodeNotFound()

    with store_errors(db, "redeem"):
        promo = _find_active_code(db, code)
        _check_redeemable(promo, now)
        promo_id = promo.id
        granted = promo.tokens

        # The checks above may have read a stale row; this UPDATE is the authoritative one
        claimed = db.query(PromoCode).filter(
            PromoCode.id == promo_id,
            PromoCode.active.is_(True),
            PromoCode.current_uses < PromoCode.max_uses,
            or_(PromoCode.expires_at.is_(None), PromoCode.expires_at >= now)
        ).update({
            PromoCode.current_uses: PromoCode.current_uses + 1
        }, synchronize_session=False)

        if not claimed:
            db.rollback()
            fresh = db.query(PromoCode).filter(PromoCode.id == promo_id).first()
            logger.info("Promo code %s lost a concurrent redemption race for profile %s", code, profile_id)
            _check_redeemable(fresh, now)
            raise UsageLimitReached()

        try:
            balance = ledger.credit(db, profile_id, granted, commit=False)
        except StudioError:
            db.rollback()
            raise
        db.commit()

    logger.info("Promo code %s redeemed by profile %s: +%s tokens, balance now %s", code, profile_id, granted, balance)
    return granted, balance


def create_promo_code(
    db: Session,
    code_text: str,
    tokens: int,
    max_uses: int,
    expires_at: Optional[datetime] = None
) -> PromoCode:
    code = normalize_code(code_text)
    if not code:
        raise ValueError("Promo code text is required")
    if tokens <= 0:
        raise ValueError("tokens must be a positive integer")
    if max_uses <= 0:
        raise ValueError("max_uses must be a positive integer")

    promo = PromoCode(
        code=code,
        tokens=tokens,
        max_uses=max_uses,
        current_uses=0,
        expires_at=expires_at,
        active=True
    )
    try:
        db.add(promo)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError(f"Promo code {code} already exists") from e
    db.refresh(promo)
    logger.info("Created promo code %s (%s tokens, %s uses, expires %s)", code, tokens, max_uses, expires_at)
    return promo


def deactivate_spent_codes(db: Session, now: Optional[datetime] = None) -> int:
    """Flip active=false on codes that are used up or past their expiry. Returns the number deactivated."""
    now = now or utc_now()
    with store_errors(db, "deactivate_spent_codes"):
        count = db.query(PromoCode).filter(
            PromoCode.active.is_(True),
            or_(
                PromoCode.current_uses >= PromoCode.max_uses,
                PromoCode.expires_at < now
            )
        ).update({PromoCode.active: False}, synchronize_session=False)
        db.commit()
    logger.info("Deactivated %s spent or expired promo code(s)", count)
    return count
