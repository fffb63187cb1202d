"""
Guest Reviews API Module
========================

Framework-agnostic service layer: an HTTP adapter maps each route to one
ReviewService method and serializes the returned ApiResponse.
"""

from .models import ApiResponse, ReviewActionRequest, BulkActionRequest, SyncRequest
from .services import ReviewService

__all__ = [
    "ApiResponse",
    "ReviewActionRequest",
    "BulkActionRequest",
    "SyncRequest",
    "ReviewService",
]
