"""
Title Analysis
Classifies calendar event titles (event type, generic or not) so calendar
moments can be matched with a better description or prompted for context.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional


EVENT_TYPES = (
    "1:1",
    "team_meeting",
    "interview",
    "presentation",
    "review",
    "planning",
    "social",
    "external",
    "unknown",
)

# Checked in order; first hit wins
EVENT_TYPE_PATTERNS: Dict[str, List[re.Pattern]] = {
    "1:1": [
        re.compile(r"1[:\-]?1", re.I),
        re.compile(r"one[- ]?on[- ]?one", re.I),
        re.compile(r"1\s*on\s*1", re.I),
    ],
    "team_meeting": [
        re.compile(r"team\s*(meeting|sync|call)", re.I),
        re.compile(r"stand[- ]?up", re.I),
        re.compile(r"weekly\s*(sync|meeting)", re.I),
        re.compile(r"daily\s*(sync|standup)", re.I),
        re.compile(r"all[- ]?hands", re.I),
        re.compile(r"staff\s*meeting", re.I),
    ],
    "interview": [
        re.compile(r"interview", re.I),
        re.compile(r"candidate", re.I),
        re.compile(r"hiring", re.I),
        re.compile(r"screening", re.I),
    ],
    "presentation": [
        re.compile(r"present", re.I),
        re.compile(r"demo", re.I),
        re.compile(r"pitch", re.I),
        re.compile(r"showcase", re.I),
        re.compile(r"walkthrough", re.I),
    ],
    "review": [
        re.compile(r"review", re.I),
        re.compile(r"feedback", re.I),
        re.compile(r"performance", re.I),
        re.compile(r"retro", re.I),
        re.compile(r"post[- ]?mortem", re.I),
    ],
    "planning": [
        re.compile(r"planning", re.I),
        re.compile(r"roadmap", re.I),
        re.compile(r"strategy", re.I),
        re.compile(r"brainstorm", re.I),
        re.compile(r"ideation", re.I),
        re.compile(r"kick[- ]?off", re.I),
        re.compile(r"sprint", re.I),
    ],
    "social": [
        re.compile(r"happy\s*hour", re.I),
        re.compile(r"lunch", re.I),
        re.compile(r"coffee", re.I),
        re.compile(r"social", re.I),
        re.compile(r"celebration", re.I),
        re.compile(r"party", re.I),
        re.compile(r"team\s*building", re.I),
        re.compile(r"offsite", re.I),
    ],
}

GENERIC_PATTERNS = [
    re.compile(p, re.I) for p in (
        r"^meeting$",
        r"^call$",
        r"^sync$",
        r"^check[- ]?in$",
        r"^catch[- ]?up$",
        r"^touch[- ]?base$",
        r"^chat$",
        r"^talk$",
        r"^discussion$",
        r"^quick\s+(call|chat|sync|meeting)$",
        r"^weekly\s*(sync|meeting|call)?$",
        r"^daily\s*(sync|standup|meeting)?$",
        r"^team\s*(meeting|sync|call)?$",
        r"^1[:\-]?1$",
        r"^one[- ]?on[- ]?one$",
        r"^1\s*on\s*1$",
        r"^stand[- ]?up$",
        r"^review$",
        r"^feedback$",
        r"^update$",
        r"^status$",
        r"^debrief$",
    )
]

QUESTIONS_BY_EVENT_TYPE: Dict[str, List[str]] = {
    "1:1": [
        "What do you want to discuss or accomplish?",
        "Any challenges you're facing?",
        "Is this a regular check-in or something specific?",
    ],
    "team_meeting": [
        "What topics will be discussed?",
        "Are there decisions to be made?",
        "What's your role in this meeting?",
    ],
    "interview": [
        "What role is this for?",
        "What aspects are you most focused on?",
        "Are you the interviewer or interviewee?",
    ],
    "presentation": [
        "What's your main message?",
        "Who's the audience?",
        "What outcome are you hoping for?",
    ],
    "review": [
        "What's being reviewed?",
        "Are you giving or receiving feedback?",
        "Any specific areas to focus on?",
    ],
    "planning": [
        "What are you planning?",
        "What decisions need to be made?",
        "What's the timeframe?",
    ],
    "social": [
        "Who will be there?",
        "Any conversation topics you want to remember?",
    ],
    "external": [
        "Who are you meeting with?",
        "What's the purpose of this meeting?",
        "What do you want to achieve?",
    ],
    "unknown": [
        "What's this meeting about?",
        "What do you want to achieve?",
    ],
}

FILLER_WORDS = frozenset(["a", "an", "the", "with", "for", "and", "or", "at", "to", "in", "on"])


@dataclass
class TitleAnalysis:
    isGeneric: bool
    detectedEventType: str
    genericReason: Optional[str] = None  # short | common_pattern | no_description
    suggestedQuestions: List[str] = field(default_factory=list)


def detectEventType(title: str, description: Optional[str] = None) -> str:
    """Event type from title + description, 'unknown' when nothing matches"""
    combined = f"{title or ''} {description or ''}".lower()

    for eventType, patterns in EVENT_TYPE_PATTERNS.items():
        if any(pattern.search(combined) for pattern in patterns):
            return eventType

    return "unknown"


def _countMeaningfulWords(text: str) -> int:
    return len([w for w in text.lower().split() if w not in FILLER_WORDS])


def analyzeEventTitle(title: str, description: Optional[str] = None) -> TitleAnalysis:
    """
    Decide whether a calendar title is too generic to match well on its own

    Rules, first hit wins:
    1. fewer than 3 meaningful words -> 'short'
    2. whole title is a known generic phrase -> 'common_pattern'
    3. fewer than 4 words and no real description -> 'no_description'
    """
    trimmed = (title or "").strip()
    wordCount = _countMeaningfulWords(trimmed)
    eventType = detectEventType(trimmed, description)

    reason = None
    if wordCount < 3:
        reason = "short"
    elif any(pattern.search(trimmed) for pattern in GENERIC_PATTERNS):
        reason = "common_pattern"
    elif wordCount < 4 and len((description or "").strip()) < 10:
        reason = "no_description"

    questions = QUESTIONS_BY_EVENT_TYPE.get(eventType, QUESTIONS_BY_EVENT_TYPE["unknown"])[:2] if reason else []

    return TitleAnalysis(
        isGeneric=reason is not None,
        detectedEventType=eventType,
        genericReason=reason,
        suggestedQuestions=questions,
    )


def combineContextForMatching(originalTitle: str, userContext: Optional[str] = None) -> str:
    """'title: context' for matching; the stored description is left alone"""
    if not userContext or not userContext.strip():
        return originalTitle
    return f"{originalTitle}: {userContext.strip()}"
