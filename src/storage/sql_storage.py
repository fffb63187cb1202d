"""
SQL Review Storage
==================

SQLAlchemy-backed adapter. Works with the default SQLite file and with any
other SQLAlchemy URL (e.g. postgresql+psycopg2://...).

Scalar fields get their own columns (property_id and status are indexed);
rating categories and metadata are stored as JSON text. Timestamps are
stored as UTC and read back as aware datetimes.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, Float, String, Text, create_engine, delete, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from ..reviews.errors import ReviewNotFoundError
from ..reviews.review_models import Review, ReviewMetadata, ReviewRating, ReviewStatus
from .base import ReviewStorage

logger = logging.getLogger(__name__)

Base = declarative_base()


class ReviewRow(Base):
    """Table row for one canonical review."""
    __tablename__ = "reviews"

    id = Column(String(64), primary_key=True)
    source_id = Column(String(255), nullable=True)
    source = Column(String(32), nullable=False, default="unknown")

    property_id = Column(String(255), index=True, nullable=True)
    property_name = Column(String(255), nullable=False, default="")

    guest_name = Column(String(255), nullable=False, default="")
    review_text = Column(Text, nullable=False, default="")
    rating_overall = Column(Float, nullable=True)
    rating_categories = Column(Text, nullable=False, default="{}")
    submitted_at = Column(DateTime(timezone=True), nullable=False)

    status = Column(String(16), index=True, nullable=False, default=ReviewStatus.PENDING.value)
    approved_by = Column(String(255), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String(255), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    channel = Column(String(32), nullable=True)
    type = Column(String(64), nullable=False)
    metadata_json = Column("metadata", Text, nullable=False, default="{}")

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is written as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def review_to_row(review: Review) -> ReviewRow:
    return ReviewRow(
        id=review.id,
        source_id=review.source_id,
        source=review.source,
        property_id=review.property_id,
        property_name=review.property_name,
        guest_name=review.guest_name,
        review_text=review.review_text,
        rating_overall=review.rating.overall,
        rating_categories=json.dumps(review.rating.categories),
        submitted_at=_as_utc(review.submitted_at),
        status=review.status.value,
        approved_by=review.approved_by,
        approved_at=_as_utc(review.approved_at),
        rejected_by=review.rejected_by,
        rejected_at=_as_utc(review.rejected_at),
        channel=review.channel,
        type=review.type,
        metadata_json=json.dumps(review.metadata.to_dict()),
        created_at=_as_utc(review.created_at),
        updated_at=_as_utc(review.updated_at),
    )


def row_to_review(row: ReviewRow) -> Review:
    return Review(
        id=row.id,
        source_id=row.source_id,
        source=row.source,
        property_id=row.property_id,
        property_name=row.property_name or "",
        guest_name=row.guest_name or "",
        review_text=row.review_text or "",
        rating=ReviewRating(
            overall=row.rating_overall,
            categories=json.loads(row.rating_categories or "{}"),
        ),
        submitted_at=_as_utc(row.submitted_at),
        status=ReviewStatus(row.status),
        approved_by=row.approved_by,
        approved_at=_as_utc(row.approved_at),
        rejected_by=row.rejected_by,
        rejected_at=_as_utc(row.rejected_at),
        channel=row.channel,
        type=row.type,
        metadata=ReviewMetadata.from_dict(json.loads(row.metadata_json or "{}")),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlReviewStorage(ReviewStorage):
    """Reviews table behind a SQLAlchemy engine; one transaction per save."""

    backend = "sql"

    def __init__(self, database_url: str = "sqlite:///data/reviews.db", echo: bool = False):
        self.database_url = database_url
        self._ensure_sqlite_dir(database_url)

        self.engine = create_engine(database_url, echo=echo, future=True)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        Base.metadata.create_all(self.engine)

        logger.info(f"SQL review storage ready: {self.engine.url.render_as_string(hide_password=True)}")

    @staticmethod
    def _ensure_sqlite_dir(database_url: str) -> None:
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    def save(self, reviews: Iterable[Review]) -> int:
        written = 0
        with self.SessionLocal() as session, session.begin():
            for review in reviews:
                session.merge(review_to_row(review))
                written += 1
        logger.debug(f"Saved {written} review(s) to SQL storage")
        return written

    def get_all(self) -> List[Review]:
        with self.SessionLocal() as session:
            rows = session.execute(select(ReviewRow)).scalars().all()
            return [row_to_review(row) for row in rows]

    def get_by_id(self, review_id: str) -> Review:
        with self.SessionLocal() as session:
            row = session.get(ReviewRow, review_id)
            if row is None:
                raise ReviewNotFoundError(review_id)
            return row_to_review(row)

    def exists(self, review_id: str) -> bool:
        with self.SessionLocal() as session:
            return session.get(ReviewRow, review_id) is not None

    def count(self) -> int:
        with self.SessionLocal() as session:
            return session.execute(select(func.count()).select_from(ReviewRow)).scalar_one()

    def clear(self) -> None:
        with self.SessionLocal() as session, session.begin():
            session.execute(delete(ReviewRow))
        logger.info("SQL review storage cleared")

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["url"] = self.engine.url.render_as_string(hide_password=True)
        return info

    def close(self) -> None:
        self.engine.dispose()
