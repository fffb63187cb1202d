"""Review moderation: approve / reject, single and bulk."""

from .moderation_service import (
    ModerationService,
    ModerationAction,
    BulkItemResult,
    BulkActionResult,
    parse_action,
)

__all__ = [
    "ModerationService",
    "ModerationAction",
    "BulkItemResult",
    "BulkActionResult",
    "parse_action",
]
