"""
Per-profile library of saved posts.

Every query carries an equality filter on the owning profile id. Items owned by
someone else behave exactly like items that do not exist.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from studio.models.saved_content import SavedContent
from studio.core.errors import NotFound
from studio.db.session import store_errors
from studio.utils.clock import utc_now

logger = logging.getLogger(__name__)


def default_title(content_type: str, business_name: Optional[str]) -> str:
    if business_name:
        return f"{content_type} for {business_name}"
    return content_type


def save_content(
    db: Session,
    profile_id: str,
    content: str,
    content_type: str,
    platform: str,
    title: Optional[str] = None,
    business_name: Optional[str] = None
) -> SavedContent:
    item = SavedContent(
        user_id=profile_id,
        title=title or default_title(content_type, business_name),
        content=content,
        content_type=content_type,
        platform=platform,
        created_at=utc_now()
    )
    with store_errors(db, "save_content"):
        db.add(item)
        db.commit()
        db.refresh(item)
    logger.info("Saved content %s (%s/%s) for profile %s", item.id, content_type, platform, profile_id)
    return item


def list_content(db: Session, profile_id: str, platform: Optional[str] = None) -> List[SavedContent]:
    """Newest first. platform=None or "all" returns every platform."""
    with store_errors(db, "list_content"):
        query = db.query(SavedContent).filter(SavedContent.user_id == profile_id)
        if platform and platform != "all":
            query = query.filter(SavedContent.platform == platform)
        return query.order_by(SavedContent.created_at.desc(), SavedContent.id.desc()).all()


def get_content(db: Session, profile_id: str, item_id: str) -> SavedContent:
    with store_errors(db, "get_content"):
        item = db.query(SavedContent).filter(
            SavedContent.id == item_id,
            SavedContent.user_id == profile_id
        ).first()
    if not item:
        raise NotFound("Content not found")
    return item


def delete_content(db: Session, profile_id: str, item_id: str) -> None:
    with store_errors(db, "delete_content"):
        deleted = db.query(SavedContent).filter(
            SavedContent.id == item_id,
            SavedContent.user_id == profile_id
        ).delete(synchronize_session=False)
        if not deleted:
            db.rollback()
            raise NotFound("Content not found")
        db.commit()
    logger.info("Deleted content %s for profile %s", item_id, profile_id)
