"""Standardized API Response Schemas"""

from typing import Generic, TypeVar
from pydantic import BaseModel


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.

    Example:
        {
            "success": true,
            "data": {...},
            "message": "Payment recorded successfully"
        }
    """
    success: bool = True
    data: T | None = None
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.

    Example:
        {
            "success": false,
            "error": {
                "code": "EXCEEDS_REMAINING_BALANCE",
                "message": "Payment of 85.00 exceeds the remaining balance of 80.00"
            }
        }
    """
    success: bool = False
    error: ErrorDetail
