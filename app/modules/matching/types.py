"""
Matching Types
Plain data passed between the matcher, the validator and the moment pipeline
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class GemForMatching:
    """Candidate thought as sent to the scorer"""
    id: str
    content: str
    context_tag: str
    source: Optional[str] = None


@dataclass
class GemMatch:
    """Sanitized scorer output for one thought"""
    gem_id: str
    relevance_score: float  # 0.5 to 1.0 after validation
    relevance_reason: str


@dataclass
class LearnedThought:
    """Thought previously marked helpful for similar moments"""
    gem_id: str
    gem_content: str
    confidence_score: float  # helpful / (helpful + not_helpful)
    pattern_sources: List[str] = field(default_factory=list)  # "keyword:budget", ...
    helpful_count: int = 0


@dataclass
class MatchingResult:
    matches: List[GemMatch]
    processing_time_ms: int
    error: Optional[str] = None  # set when the scorer call degraded
