from app.schemas.moment import (
    CalendarEventRequest,
    CreateMomentRequest,
    CreateMomentFromEventRequest,
    EnrichMomentRequest,
    UpdateMomentStatusRequest,
    FeedbackRequest,
    AnalyzeTitleRequest,
    ThoughtResponse,
    MatchedThoughtResponse,
    MomentResponse,
    MomentWithMatchesResponse,
    MomentListResponse,
    FeedbackResponse,
    LearningStatsResponse,
    TitleAnalysisResponse,
)

__all__ = [
    "CalendarEventRequest",
    "CreateMomentRequest",
    "CreateMomentFromEventRequest",
    "EnrichMomentRequest",
    "UpdateMomentStatusRequest",
    "FeedbackRequest",
    "AnalyzeTitleRequest",
    "ThoughtResponse",
    "MatchedThoughtResponse",
    "MomentResponse",
    "MomentWithMatchesResponse",
    "MomentListResponse",
    "FeedbackResponse",
    "LearningStatsResponse",
    "TitleAnalysisResponse",
]
