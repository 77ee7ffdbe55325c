"""
Moment Schemas
Request/Response validation with Pydantic
"""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from uuid import UUID
from typing import Optional, List, Literal, Dict


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase"""
    components = string.split('_')
    return components[0] + ''.join(x.title() for x in components[1:])


class CamelModel(BaseModel):
    """Accepts camelCase and snake_case, outputs camelCase"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True
    )


class CalendarEventRequest(CamelModel):
    event_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=500)
    start_time: Optional[datetime] = None
    attendees: List[str] = Field(default_factory=list)


class CreateMomentRequest(CamelModel):
    """
    Manual moment

    Length limits are checked by the service so the error message matches
    the calendar path.
    """
    description: str
    source: Literal["manual", "calendar"] = "manual"
    user_context: Optional[str] = None
    detected_event_type: Optional[str] = None
    calendar_event: Optional[CalendarEventRequest] = None


class CreateMomentFromEventRequest(CamelModel):
    calendar_event: CalendarEventRequest
    event_description: Optional[str] = None
    user_context: Optional[str] = None
    detected_event_type: Optional[str] = None


class EnrichMomentRequest(CamelModel):
    user_context: str = Field(..., min_length=1)
    detected_event_type: Optional[str] = None


class UpdateMomentStatusRequest(CamelModel):
    status: Literal["active", "completed", "dismissed"]


class FeedbackRequest(CamelModel):
    moment_id: UUID
    gem_id: UUID


class AnalyzeTitleRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None


class ThoughtResponse(CamelModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )
    
    id: UUID
    content: str
    context_tag: str
    source: Optional[str] = None
    status: str


class MatchedThoughtResponse(CamelModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )
    
    id: UUID
    moment_id: UUID
    gem_id: UUID
    relevance_score: float
    relevance_reason: Optional[str] = None
    match_source: str
    was_helpful: Optional[bool] = None
    was_reviewed: bool
    created_at: datetime
    thought: Optional[ThoughtResponse] = None


class MomentResponse(CamelModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )
    
    id: UUID
    user_id: UUID
    description: str
    source: str
    user_context: Optional[str] = None
    detected_event_type: Optional[str] = None
    calendar_event_id: Optional[str] = None
    calendar_event_title: Optional[str] = None
    calendar_event_start: Optional[datetime] = None
    gems_matched_count: int
    ai_processing_time_ms: Optional[int] = None
    status: str
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MomentWithMatchesResponse(CamelModel):
    moment: MomentResponse
    matched_thoughts: List[MatchedThoughtResponse]
    processing_time_ms: int
    degraded: List[str] = Field(default_factory=list)


class MomentListResponse(CamelModel):
    moments: List[MomentResponse]
    total: int


class FeedbackResponse(CamelModel):
    success: bool
    message: str
    patterns_recorded: int


class LearningStatsResponse(CamelModel):
    total_learnings: int
    by_pattern_type: Dict[str, int]
    top_thoughts: List[Dict]


class TitleAnalysisResponse(CamelModel):
    is_generic: bool
    generic_reason: Optional[str] = None
    suggested_questions: List[str]
    detected_event_type: str
