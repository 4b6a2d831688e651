"""
Model for shared, finite-use promo codes exchangeable for tokens.
Codes are deactivated when spent or expired, never deleted.
"""
import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint
from studio.db.base import Base
from studio.utils.clock import utc_now


class PromoCode(Base):
    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint("tokens > 0", name="ck_promo_codes_tokens_positive"),
        CheckConstraint("max_uses > 0", name="ck_promo_codes_max_uses_positive"),
        CheckConstraint("current_uses <= max_uses", name="ck_promo_codes_uses_within_limit"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String, unique=True, index=True, nullable=False)  # Always stored uppercase
    tokens = Column(Integer, nullable=False)  # Tokens credited per redemption
    max_uses = Column(Integer, nullable=False)
    current_uses = Column(Integer, default=0, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<PromoCode(code={self.code}, uses={self.current_uses}/{self.max_uses}, active={self.active})>"
