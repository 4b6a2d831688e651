"""
Generation gate: every content generation goes through here.

Order of operations:
1. Refuse up front when the balance is below GENERATION_COST (nothing mutated).
2. Call the generation collaborator. A failure means no charge.
3. Debit GENERATION_COST with the ledger's conditional UPDATE.

Step 1 is only a fast path. If a concurrent request spends the last token while
this one is generating, step 3 fails with InsufficientBalance and the variants are
discarded, so a single token can never pay for two generations.
"""
import logging
from typing import List
from sqlalchemy.orm import Session
from studio.models.profile import Profile
from studio.core.token_rules import GENERATION_COST
from studio.core.errors import InsufficientBalance, GenerationUnavailable, NotFound
from studio.db.session import store_errors
from studio.schemas.content import GenerationRequest, GeneratedVariant
from studio.services import ledger

logger = logging.getLogger(__name__)


def generate(db: Session, profile_id: str, request: GenerationRequest, engine) -> tuple[List[GeneratedVariant], int]:
    """
    Returns:
        (variants, new_balance)

    Raises:
        InsufficientBalance, GenerationUnavailable, NotFound
    """
    with store_errors(db, "generate"):
        balance = db.query(Profile.tokens).filter(Profile.id == profile_id).scalar()
        # Close the read transaction; the collaborator call can take seconds
        db.rollback()

    if balance is None:
        raise NotFound("Profile not found")
    if balance < GENERATION_COST:
        logger.info("Generation refused for profile %s: balance %s", profile_id, balance)
        raise InsufficientBalance(balance=balance, required=GENERATION_COST)

    try:
        variants = engine.generate(request)
    except GenerationUnavailable:
        logger.warning("Generation unavailable for profile %s, no tokens debited", profile_id)
        raise
    except Exception as e:
        logger.exception("Generation collaborator failed for profile %s, no tokens debited: %s", profile_id, e)
        raise GenerationUnavailable() from e

    balance = ledger.debit(db, profile_id, GENERATION_COST)
    logger.info(
        "Generated %s %s variant(s) for profile %s on %s, balance now %s",
        len(variants), request.contentType, profile_id, request.platform, balance
    )
    return variants, balance
