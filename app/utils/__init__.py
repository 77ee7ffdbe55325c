"""Utils Package"""
from app.utils.logger import logger
from app.utils.result import Result
from app.utils.exceptions import (
    NotFoundException,
    ValidationException,
    MomentPersistenceException,
    OpenAIException,
)

__all__ = [
    "logger",
    "Result",
    "NotFoundException",
    "ValidationException",
    "MomentPersistenceException",
    "OpenAIException",
]
