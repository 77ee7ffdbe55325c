"""
Moment & MomentThought Models
A moment is a situation the user prepares for; moment_gems links it to matched thoughts
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, Float, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.database import Base


class Moment(Base):
    """
    Moment model

    Notes:
    - source: 'manual' | 'calendar'
    - status: 'active' -> 'completed' | 'dismissed' (completed_at set on completion)
    - description is the user-facing label; user_context is only appended
      for matching, never written into description
    - gems_matched_count: number of moment_gems rows after the last (re)match
    """
    __tablename__ = "moments"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    
    # Situation
    description = Column(Text, nullable=False)
    source = Column(String, default="manual", nullable=False)
    user_context = Column(Text, nullable=True)
    detected_event_type = Column(String, nullable=True)
    
    # Calendar linkage
    calendar_event_id = Column(Text, nullable=True)
    calendar_event_title = Column(Text, nullable=True)
    calendar_event_start = Column(DateTime, nullable=True)
    calendar_attendees = Column(JSON, nullable=True)
    # Format: ["alice@example.com", "bob@example.com"]
    
    # Matching results
    gems_matched_count = Column(Integer, default=0, nullable=False)
    ai_processing_time_ms = Column(Integer, nullable=True)
    
    # Status: active, completed, dismissed
    status = Column(String, default="active", nullable=False)
    completed_at = Column(DateTime, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def __repr__(self):
        return f"<Moment(id={self.id}, source={self.source}, matches={self.gems_matched_count})>"


class MomentThought(Base):
    """
    Match between one moment and one thought

    Notes:
    - At most one row per (moment_id, gem_id): re-matching updates, never duplicates
    - was_helpful: None = unrated, True/False once the user responds
    - match_source: 'ai' | 'learned' | 'both'
    """
    __tablename__ = "moment_gems"
    __table_args__ = (
        UniqueConstraint("moment_id", "gem_id", name="uq_moment_gems_moment_gem"),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    moment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("moments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    gem_id = Column(
        UUID(as_uuid=True),
        ForeignKey("gems.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id = Column(UUID(as_uuid=True), nullable=False)
    
    # AI relevance
    relevance_score = Column(Float, nullable=False)
    relevance_reason = Column(Text, nullable=True)
    match_source = Column(String, default="ai", nullable=False)
    
    # Feedback
    was_helpful = Column(Boolean, nullable=True)
    was_reviewed = Column(Boolean, default=False, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    # Relationships
    thought = relationship("Thought", lazy="selectin")
    
    def __repr__(self):
        return f"<MomentThought(moment={self.moment_id}, gem={self.gem_id}, score={self.relevance_score})>"
