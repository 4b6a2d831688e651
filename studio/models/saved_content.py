"""
Model for generated posts a user saved to their library.
Rows are immutable; the library only supports save, list and delete.
"""
import uuid
from sqlalchemy import Column, String, Text, ForeignKey, DateTime
from studio.db.base import Base
from studio.utils.clock import utc_now


class SavedContent(Base):
    __tablename__ = "saved_content"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    content_type = Column(String, nullable=False)
    platform = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)

    def __repr__(self):
        return f"<SavedContent(id={self.id}, user_id={self.user_id}, platform={self.platform})>"
