from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from studio.db.session import get_db
from studio.dependencies.auth import get_current_profile_id
from studio.schemas.profile import (
    BalanceResponse,
    DailyClaimStatus,
    DailyClaimResponse,
    PromoRedeemRequest,
    PromoRedeemResponse,
)
from studio.services import ledger, daily_grant, promo_redemption
from studio.api.routes.profiles import load_profile
from studio.core.token_rules import DAILY_GRANT_TOKENS

router = APIRouter()


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    return {"tokens": ledger.get_balance(db, profile_id)}


@router.get("/daily-claim", response_model=DailyClaimStatus)
def get_daily_claim_status(
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    return daily_grant.daily_claim_status(load_profile(db, profile_id))


@router.post("/daily-claim", response_model=DailyClaimResponse)
def claim_daily_tokens(
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    """Claim the free daily tokens. 429 (NotEligible) until 24h after the previous claim."""
    balance, next_claim_at = daily_grant.claim_daily(db, profile_id)
    return {"tokens": balance, "granted": DAILY_GRANT_TOKENS, "next_claim_at": next_claim_at}


@router.post("/promo/redeem", response_model=PromoRedeemResponse)
def redeem_promo_code(
    redeem_data: PromoRedeemRequest,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    granted, balance = promo_redemption.redeem(db, profile_id, redeem_data.code)
    return {
        "code": promo_redemption.normalize_code(redeem_data.code),
        "granted": granted,
        "tokens": balance,
    }
