"""Response envelopes."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Successful response envelope.

    Attributes:
        success: Always True
        message: Short human-readable summary
        data: Endpoint-specific payload
    """

    success: bool = True
    message: Optional[str] = None
    data: Any = None


class ErrorResponse(BaseModel):
    """Error response envelope.

    Attributes:
        success: Always False
        error: Short machine-readable error code
        detail: User-safe explanation
        errors: Optional field -> message mapping for validation failures
        correlation_id: Request tracking ID
    """

    success: bool = False
    error: str
    detail: str
    errors: Optional[Dict[str, str]] = None
    correlation_id: Optional[str] = None


class UserStats(BaseModel):
    """Summary counters over the user collection."""

    total: int = Field(ge=0)
    withAvatar: int = Field(ge=0)
    validEmails: int = Field(ge=0)
    completeProfiles: int = Field(ge=0)
