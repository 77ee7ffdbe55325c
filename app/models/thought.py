"""
Thought Model
Maps to the 'gems' table (thoughts were called gems in the first schema)
"""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from datetime import datetime
import uuid

from app.database import Base


# Statuses that still take part in matching; retired/graduated thoughts do not
ELIGIBLE_THOUGHT_STATUSES = ("active", "passive")


class Thought(Base):
    """
    A stored piece of user wisdom

    Notes:
    - context_tag: free-form label ("meetings", "feedback", ...)
    - status: active | passive | retired | graduated
    - Read-only for the matching pipeline
    """
    __tablename__ = "gems"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    
    # Content
    content = Column(Text, nullable=False)
    context_tag = Column(String, nullable=False, default="other")
    source = Column(Text, nullable=True)
    
    # Lifecycle
    status = Column(String, nullable=False, default="active")
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def __repr__(self):
        return f"<Thought(id={self.id}, context={self.context_tag}, status={self.status})>"
