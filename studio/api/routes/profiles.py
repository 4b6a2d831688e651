from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from studio.db.session import get_db, store_errors
from studio.dependencies.auth import get_current_profile_id
from studio.models.profile import Profile
from studio.schemas.profile import ProfileResponse, ProfileUpdate
from studio.services.ledger import effective_tier
from studio.services.daily_grant import daily_claim_status
from studio.core.errors import NotFound
from studio.utils.clock import utc_now

router = APIRouter()


def load_profile(db: Session, profile_id: str) -> Profile:
    with store_errors(db, "load_profile"):
        profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise NotFound("Profile not found")
    return profile


def _profile_response(profile: Profile) -> ProfileResponse:
    now = utc_now()
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        tokens=profile.tokens,
        subscription_type=profile.subscription_type,
        effective_subscription_type=effective_tier(profile, now),
        subscription_expires_at=profile.subscription_expires_at,
        daily_claim=daily_claim_status(profile, now),
        created_at=profile.created_at,
    )


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    """Current profile, always read from the database (clients refetch after every mutation)"""
    return _profile_response(load_profile(db, profile_id))


@router.put("/me", response_model=ProfileResponse)
def update_my_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    profile_id: str = Depends(get_current_profile_id)
):
    """Update display name. Tokens and subscription are only changed by the ledger."""
    profile = load_profile(db, profile_id)
    if profile_data.full_name is not None:
        with store_errors(db, "update_profile"):
            profile.full_name = profile_data.full_name.strip()
            db.commit()
            db.refresh(profile)
    return _profile_response(profile)
