"""
Content models
"""
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, Text
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SiteContent(SQLModel, table=True):
    """
    Key/value content row
    Table: site_content

    content_data holds the resource serialized as JSON text, e.g.
    id="events" -> '[{"id": 1, "title": "Race A"}]'
    """
    __tablename__ = "site_content"

    id: str = Field(primary_key=True, max_length=255)
    content_data: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now),
    )
