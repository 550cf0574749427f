"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


class ResourceAlreadyExistsError(BaseAPIException):
    """Resource already exists"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} already exists", status_code=409)


# Validation Errors
class ValidationError(BaseAPIException):
    """Validation error"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


class InvalidArgumentError(BaseAPIException):
    """Caller passed an argument the grading core cannot work with"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


# Business Logic Errors
class BusinessLogicError(BaseAPIException):
    """Business logic error"""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class UnsupportedScoringTypeError(BusinessLogicError):
    """Contest uses a scoring type the ranking rules do not implement"""
    def __init__(self, scoring_type: str):
        super().__init__(f"Scoring type '{scoring_type}' is not supported")


# System Errors
class JudgeUnavailableError(BaseAPIException):
    """External judge request failed"""
    def __init__(self, message: str = "Judge request failed"):
        super().__init__(message, status_code=502)


class FinalizationError(BaseAPIException):
    """Contest finalization failed and was rolled back"""
    def __init__(self, contest_id: int, message: str):
        super().__init__(
            f"Finalization of contest {contest_id} failed: {message}",
            status_code=500,
            details={"contest_id": contest_id}
        )
        self.contest_id = contest_id
