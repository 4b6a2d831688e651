from studio.models.profile import Profile
from studio.models.saved_content import SavedContent
from studio.models.promo_code import PromoCode

__all__ = [
    "Profile",
    "SavedContent",
    "PromoCode",
]
