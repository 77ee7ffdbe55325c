"""
Matching constraints
"""

MAX_GEMS_TO_MATCH = 5
MIN_RELEVANCE_SCORE = 0.5
MAX_REASON_LENGTH = 500
MATCHING_TIMEOUT_MS = 5000
