"""
Moment Endpoints
Create moments, re-match them with added context and learn from feedback
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.v1.dependencies import getGemMatcher
from app.database import getDbSession
from app.modules.matching import GemMatcher
from app.modules.moments import FeedbackRecorder, LearningStore, MomentService, CalendarEventData, MomentWithMatches
from app.modules.moments.title_analysis import analyzeEventTitle
from app.schemas import (
    AnalyzeTitleRequest,
    CalendarEventRequest,
    CreateMomentFromEventRequest,
    CreateMomentRequest,
    EnrichMomentRequest,
    FeedbackRequest,
    FeedbackResponse,
    LearningStatsResponse,
    MatchedThoughtResponse,
    MomentListResponse,
    MomentResponse,
    MomentWithMatchesResponse,
    TitleAnalysisResponse,
    UpdateMomentStatusRequest,
)
from app.utils.logger import logger

router = APIRouter()


def _toCalendarData(event: CalendarEventRequest) -> CalendarEventData:
    return CalendarEventData(
        event_id=event.event_id,
        title=event.title,
        start_time=event.start_time,
        attendees=list(event.attendees),
    )


def _toResponse(result: MomentWithMatches) -> MomentWithMatchesResponse:
    return MomentWithMatchesResponse(
        moment=MomentResponse.model_validate(result.moment),
        matched_thoughts=[MatchedThoughtResponse.model_validate(match) for match in result.matches],
        processing_time_ms=result.processing_time_ms,
        degraded=result.degraded,
    )


@router.post("", response_model=MomentWithMatchesResponse, status_code=status.HTTP_201_CREATED)
async def createMoment(
    request: CreateMomentRequest,
    userId: UUID = Query(..., description="User ID"),
    db: AsyncSession = Depends(getDbSession),
    matcher: GemMatcher = Depends(getGemMatcher)
):
    """
    Create a moment and match thoughts to it

    Request Body:
    {
        "description": "Weekly 1:1 with manager",
        "userContext": "want to ask about promotion",   // optional
        "detectedEventType": "1:1"                       // optional
    }

    Errors:
    - 400: description empty or longer than 500 chars
    - 500: moment could not be stored

    Matching failures never fail the request: the moment comes back with
    fewer (or no) matched thoughts and `degraded` lists what fell back.
    """
    logger.info(f"🕐 Create moment: userId={userId}, source={request.source}")

    service = MomentService(db, matcher)
    result = await service.createAndMatch(
        userId=userId,
        description=request.description,
        source=request.source,
        calendarData=_toCalendarData(request.calendar_event) if request.calendar_event else None,
        userContext=request.user_context,
        detectedEventType=request.detected_event_type,
    )
    return _toResponse(result)


@router.post("/from-event", response_model=MomentWithMatchesResponse, status_code=status.HTTP_201_CREATED)
async def createMomentFromEvent(
    request: CreateMomentFromEventRequest,
    userId: UUID = Query(..., description="User ID"),
    db: AsyncSession = Depends(getDbSession),
    matcher: GemMatcher = Depends(getGemMatcher)
):
    """Create a calendar moment; event type is detected from the title when not given"""
    logger.info(f"📅 Moment from event: userId={userId}, event={request.calendar_event.event_id}")

    service = MomentService(db, matcher)
    result = await service.createFromCalendarEvent(
        userId=userId,
        calendarData=_toCalendarData(request.calendar_event),
        userContext=request.user_context,
        detectedEventType=request.detected_event_type,
        eventDescription=request.event_description,
    )
    return _toResponse(result)


@router.get("", response_model=MomentListResponse)
async def listMoments(
    userId: UUID = Query(..., description="User ID"),
    limit: int = Query(20, ge=1, le=100, description="Number of moments to return"),
    db: AsyncSession = Depends(getDbSession)
):
    """Most recent moments first"""
    service = MomentService(db, matcher=None)
    moments = await service.listMoments(userId, limit)
    return MomentListResponse(
        moments=[MomentResponse.model_validate(moment) for moment in moments],
        total=len(moments)
    )


@router.post("/analyze-title", response_model=TitleAnalysisResponse)
async def analyzeTitle(request: AnalyzeTitleRequest):
    """Is a calendar title too generic to match on? Which event type is it?"""
    analysis = analyzeEventTitle(request.title, request.description)
    return TitleAnalysisResponse(
        is_generic=analysis.isGeneric,
        generic_reason=analysis.genericReason,
        suggested_questions=analysis.suggestedQuestions,
        detected_event_type=analysis.detectedEventType,
    )


# ============================================
# LEARNING
# ============================================

async def _recordFeedback(request: FeedbackRequest, userId: UUID, db: AsyncSession, helpful: bool) -> FeedbackResponse:
    recorder = FeedbackRecorder(db)
    result = await recorder.recordFeedback(
        userId=userId,
        momentId=request.moment_id,
        thoughtId=request.gem_id,
        helpful=helpful,
    )

    if not result.ok:
        logger.error(f"❌ Learning error: {result.error}")
        raise HTTPException(status_code=500, detail="Failed to record learning")

    return FeedbackResponse(
        success=True,
        message="Learning recorded",
        patterns_recorded=result.value
    )


@router.post("/learn/helpful", response_model=FeedbackResponse)
async def learnHelpful(
    request: FeedbackRequest,
    userId: UUID = Query(..., description="User ID"),
    db: AsyncSession = Depends(getDbSession)
):
    """Record that a matched thought was helpful for a moment"""
    logger.info(f"👍 Helpful: moment={request.moment_id}, gem={request.gem_id}")
    return await _recordFeedback(request, userId, db, helpful=True)


@router.post("/learn/not-helpful", response_model=FeedbackResponse)
async def learnNotHelpful(
    request: FeedbackRequest,
    userId: UUID = Query(..., description="User ID"),
    db: AsyncSession = Depends(getDbSession)
):
    """Record that a matched thought was NOT helpful for a moment"""
    logger.info(f"👎 Not helpful: moment={request.moment_id}, gem={request.gem_id}")
    return await _recordFeedback(request, userId, db, helpful=False)


@router.get("/learn/stats", response_model=LearningStatsResponse)
async def learningStats(
    userId: UUID = Query(..., description="User ID"),
    db: AsyncSession = Depends(getDbSession)
):
    result = await LearningStore(db).getLearningStats(userId)
    if not result.ok:
        raise HTTPException(status_code=500, detail="Failed to load learning stats")

    stats = result.value
    return LearningStatsResponse(
        total_learnings=stats["totalLearnings"],
        by_pattern_type=stats["byPatternType"],
        top_thoughts=stats["topThoughts"],
    )


# ============================================
# SINGLE MOMENT
# ============================================

@router.get("/{moment_id}", response_model=MomentWithMatchesResponse)
async def getMoment(
    moment_id: UUID,
    userId: UUID = Query(..., description="User ID for ownership verification"),
    db: AsyncSession = Depends(getDbSession)
):
    service = MomentService(db, matcher=None)
    result = await service.getMomentWithMatches(userId, moment_id)
    return _toResponse(result)


@router.post("/{moment_id}/enrich", response_model=MomentWithMatchesResponse)
async def enrichMoment(
    moment_id: UUID,
    request: EnrichMomentRequest,
    userId: UUID = Query(..., description="User ID for ownership verification"),
    db: AsyncSession = Depends(getDbSession),
    matcher: GemMatcher = Depends(getGemMatcher)
):
    """
    Add context to a moment and re-run matching

    Earlier matches are kept; scores only go up; new thoughts are added.
    """
    logger.info(f"✏️ Enrich moment: {moment_id}")

    service = MomentService(db, matcher)
    result = await service.enrichAndRematch(
        userId=userId,
        momentId=moment_id,
        userContext=request.user_context,
        detectedEventType=request.detected_event_type,
    )
    return _toResponse(result)


@router.patch("/{moment_id}/status", response_model=MomentResponse)
async def updateMomentStatus(
    moment_id: UUID,
    request: UpdateMomentStatusRequest,
    userId: UUID = Query(..., description="User ID for ownership verification"),
    db: AsyncSession = Depends(getDbSession)
):
    service = MomentService(db, matcher=None)
    moment = await service.updateStatus(userId, moment_id, request.status)
    return MomentResponse.model_validate(moment)
