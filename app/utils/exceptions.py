"""
Custom Exceptions
"""
from fastapi import HTTPException, status


class NotFoundException(HTTPException):
    """Resource not found (404)"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )


class ValidationException(HTTPException):
    """Validation error (400)"""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class MomentPersistenceException(HTTPException):
    """Moment row could not be stored (500)"""
    def __init__(self, detail: str = "Failed to create moment"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail
        )


class OpenAIException(Exception):
    """OpenRouter API error"""
    pass


"""
Notes:
- HTTPException subclasses are turned into HTTP responses by FastAPI
- OpenAIException never reaches the endpoints: the matcher catches it
  and degrades to zero matches

Usage:
    from app.utils.exceptions import NotFoundException
    
    if not moment:
        raise NotFoundException("Moment not found")
"""
