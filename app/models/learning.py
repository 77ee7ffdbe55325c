"""
Learning Model
Pattern -> thought helpfulness counters aggregated across moments
"""
from sqlalchemy import Column, String, Integer, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from datetime import datetime
import uuid

from app.database import Base


class MomentLearning(Base):
    """
    One learning record per (user, pattern_type, pattern_key, gem)

    Notes:
    - pattern_type: event_type | keyword | recurring | attendee
    - pattern_key examples: '1:1', 'performance', 'event:abc123', 'attendee:9f86d081884c7d65'
    - Counters only ever grow; confidence = helpful / (helpful + not_helpful)
    """
    __tablename__ = "moment_learnings"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "pattern_type", "pattern_key", "gem_id",
            name="uq_moment_learnings_pattern_gem"
        ),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    
    # Pattern
    pattern_type = Column(String, nullable=False)
    pattern_key = Column(String, nullable=False)
    gem_id = Column(UUID(as_uuid=True), nullable=False)
    
    # Counters
    helpful_count = Column(Integer, default=0, nullable=False)
    not_helpful_count = Column(Integer, default=0, nullable=False)
    last_helpful_at = Column(DateTime, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def __repr__(self):
        return f"<MomentLearning({self.pattern_type}:{self.pattern_key}, gem={self.gem_id}, +{self.helpful_count}/-{self.not_helpful_count})>"
