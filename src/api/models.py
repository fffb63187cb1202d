"""
Guest Reviews API Models
========================

Pydantic models for request validation and response envelopes.
Field names match the frontend's camelCase JSON.

Every service call answers with an ApiResponse:
    {"success": true,  "data": ..., "meta": {...}, "message": "..."}
    {"success": false, "error": "not_found", "message": "...", "details": [...]}
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiResponse(BaseModel):
    """Success / failure envelope returned by every ReviewService call."""

    success: bool
    data: Optional[Any] = None
    meta: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    error: Optional[str] = None
    details: Optional[List[str]] = None

    @classmethod
    def ok(cls, data: Any = None, meta: Optional[Dict[str, Any]] = None,
           message: Optional[str] = None) -> "ApiResponse":
        return cls(success=True, data=data, meta=meta, message=message)

    @classmethod
    def fail(cls, error: str, message: str, details: Optional[List[str]] = None) -> "ApiResponse":
        return cls(success=False, error=error, message=message, details=details or None)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# REQUEST BODIES
# =============================================================================

class ReviewActionRequest(BaseModel):
    """Body of an approve / reject call."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    actionBy: str = Field(..., min_length=1, alias="action_by")
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("actionBy")
    @classmethod
    def strip_action_by(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("actionBy must not be empty")
        return v


class BulkActionRequest(BaseModel):
    """Body of a bulk approve / reject call."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    reviewIds: List[str] = Field(..., min_length=1, alias="review_ids")
    action: Literal["approve", "reject"]
    actionBy: str = Field(..., min_length=1, alias="action_by")
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("actionBy")
    @classmethod
    def strip_action_by(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("actionBy must not be empty")
        return v


class SyncRequest(BaseModel):
    """Body of a provider sync call."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sources: List[Literal["hostaway", "google"]] = Field(default_factory=lambda: ["hostaway"], min_length=1)
    forceRefresh: bool = Field(True, alias="force_refresh")
