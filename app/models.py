"""Studio Backend - SQLAlchemy ORM models.

Database tables:
1. profiles (singleton: zero or one row, always at PROFILE_ROW_ID)
2. posts
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Fixed primary key of the single profile row
PROFILE_ROW_ID = 1

# Separator for reference paths in Post.sources
SOURCES_SEPARATOR = ","


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class Profile(Base):
    """The owner's profile. Saving replaces every column of the single row."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=PROFILE_ROW_ID)

    # Required
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    occupation: Mapped[str] = mapped_column(String(255), nullable=False)

    # Optional contact details
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str | None] = mapped_column(String(128), nullable=True)
    country: Mapped[str | None] = mapped_column(String(128), nullable=True)

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utc_now
    )

    @classmethod
    def empty(cls) -> "Profile":
        """Transient profile returned when nothing has been saved yet."""
        return cls(
            full_name="",
            occupation="",
            phone="",
            address="",
            state="",
            country="",
        )


class Post(Base):
    """A published post with optional audio and source file references."""

    __tablename__ = "posts"

    # AUTOINCREMENT: ids are never reused after a delete
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    heading: Mapped[str] = mapped_column(Text, nullable=False)

    # Reference paths into the upload namespace (not foreign keys)
    audio: Mapped[str | None] = mapped_column(Text, nullable=True)
    sources: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Free text, stored as given
    links: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = {"sqlite_autoincrement": True}

    @property
    def source_paths(self) -> list[str]:
        """Source reference paths in upload order."""
        if not self.sources:
            return []
        return self.sources.split(SOURCES_SEPARATOR)
