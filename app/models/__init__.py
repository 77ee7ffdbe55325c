from app.models.thought import Thought, ELIGIBLE_THOUGHT_STATUSES
from app.models.moment import Moment, MomentThought
from app.models.learning import MomentLearning

__all__ = [
    "Thought",
    "ELIGIBLE_THOUGHT_STATUSES",
    "Moment",
    "MomentThought",
    "MomentLearning",
]
