"""
Review Query Parameters
=======================

Validated filter / sort / pagination parameters for review listings.

Accepts the camelCase query-string names the moderation UI sends
(propertyId, dateFrom, sortBy, ...) as well as the snake_case field names.

Usage:
    query = ReviewQuery.parse({"status": "approved", "rating": "4-5", "limit": 10})
"""

import re
from datetime import datetime, timedelta
from typing import Any, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..reviews.errors import ReviewValidationError
from ..reviews.review_models import ReviewStatus, parse_datetime

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_RATING_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*$")
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SortField = Literal["date", "rating", "property", "status"]
SortOrder = Literal["asc", "desc"]


def _as_list(value: Any) -> Optional[List[Any]]:
    if value is None or value == "":
        return None
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [v for v in value if v not in (None, "")]
        return items or None
    return [value]


def parse_rating_range(value: str) -> Tuple[float, float]:
    """
    Parse "min-max" into an inclusive (min, max) pair.

    Raises:
        ValueError: not of the form "4-5" / "3.5-5", or min > max
    """
    match = _RATING_RANGE.match(value)
    if not match:
        raise ValueError("rating must look like 'min-max', e.g. '4-5'")
    low, high = float(match.group(1)), float(match.group(2))
    if low > high:
        raise ValueError("rating minimum must not exceed maximum")
    return low, high


class ReviewQuery(BaseModel):
    """Filter + sort + pagination for a review listing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    property_id: Optional[List[str]] = Field(default=None, alias="propertyId")
    status: Optional[List[ReviewStatus]] = None
    channel: Optional[List[str]] = None
    rating: Optional[str] = None
    date_from: Optional[datetime] = Field(default=None, alias="dateFrom")
    date_to: Optional[datetime] = Field(default=None, alias="dateTo")
    search: Optional[str] = Field(default=None, max_length=255)

    sort_by: SortField = Field(default="date", alias="sortBy")
    sort_order: SortOrder = Field(default="desc", alias="sortOrder")
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("property_id", "status", "channel", mode="before")
    @classmethod
    def coerce_to_list(cls, v: Any) -> Optional[List[Any]]:
        """A single value or a set of values; blanks mean "no filter"."""
        return _as_list(v)

    @field_validator("rating")
    @classmethod
    def check_rating_range(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        parse_rating_range(v)
        return v.strip()

    @field_validator("date_from", mode="before")
    @classmethod
    def parse_date_from(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        parsed = parse_datetime(v)
        if parsed is None:
            raise ValueError("dateFrom must be an ISO-8601 date")
        return parsed

    @field_validator("date_to", mode="before")
    @classmethod
    def parse_date_to(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        parsed = parse_datetime(v)
        if parsed is None:
            raise ValueError("dateTo must be an ISO-8601 date")
        # A bare date includes the whole day
        if isinstance(v, str) and _DATE_ONLY.match(v.strip()):
            parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
        return parsed

    @field_validator("search")
    @classmethod
    def strip_search(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_date_bounds(self) -> "ReviewQuery":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("dateFrom must not be after dateTo")
        return self

    @property
    def rating_range(self) -> Optional[Tuple[float, float]]:
        return parse_rating_range(self.rating) if self.rating else None

    @classmethod
    def parse(cls, params: Optional[Mapping[str, Any]] = None) -> "ReviewQuery":
        """
        Validate raw parameters.

        Raises:
            ReviewValidationError: with one detail line per invalid field
        """
        try:
            return cls.model_validate(dict(params or {}))
        except ValidationError as e:
            raise ReviewValidationError(
                "Invalid query parameters",
                details=[_format_error(err) for err in e.errors()],
            )

    def with_overrides(self, **overrides: Any) -> "ReviewQuery":
        """Copy with some fields forced (values are re-validated)."""
        data = self.model_dump()
        data.update(overrides)
        return ReviewQuery.parse(data)


def _format_error(err: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
    message = err.get("msg", "invalid value")
    return f"{location}: {message}" if location else message
