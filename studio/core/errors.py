"""
User-facing error kinds for the token ledger, promo codes, generation and the content library.

Every error is recoverable: it is reported to the user who triggered the action,
nothing has been mutated, and the user may simply try again.
"""
from datetime import datetime
from typing import Optional


class StudioError(Exception):
    """Base class; subclasses set the HTTP status and a default message."""
    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class InsufficientBalance(StudioError):
    status_code = 402
    default_message = "Insufficient tokens. Please get more tokens or upgrade your plan."

    def __init__(self, balance: int = 0, required: int = 1, message: Optional[str] = None):
        self.balance = balance
        self.required = required
        super().__init__(message)


class NotEligible(StudioError):
    status_code = 429
    default_message = "Daily tokens already claimed. Next claim available in 24 hours."

    def __init__(self, next_claim_at: Optional[datetime] = None, message: Optional[str] = None):
        self.next_claim_at = next_claim_at
        super().__init__(message)


class CodeNotFound(StudioError):
    status_code = 404
    default_message = "Invalid or expired promo code"


class UsageLimitReached(StudioError):
    status_code = 409
    default_message = "Promo code has reached its usage limit"


class CodeExpired(StudioError):
    status_code = 410
    default_message = "Promo code has expired"


class GenerationUnavailable(StudioError):
    status_code = 503
    default_message = "Failed to generate content. Please try again."


class StoreUnavailable(StudioError):
    status_code = 503
    default_message = "Storage temporarily unavailable. Please try again in a moment."


class NotFound(StudioError):
    status_code = 404
    default_message = "Not found"
