from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from studio.db.base import Base
from studio.core.token_rules import STARTING_TOKENS
from studio.utils.clock import utc_now


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("tokens >= 0", name="ck_profiles_tokens_non_negative"),
    )

    id = Column(String, primary_key=True, index=True)  # Supabase auth user id (JWT "sub")
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    tokens = Column(Integer, default=STARTING_TOKENS, nullable=False)
    subscription_type = Column(String, default="free", nullable=False)  # free / monthly / yearly
    subscription_expires_at = Column(DateTime, nullable=True)
    last_daily_token_claim = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email}, tokens={self.tokens}, tier={self.subscription_type})>"
