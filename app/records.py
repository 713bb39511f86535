"""Studio Backend - Row persistence for the profile and posts.

RecordStore wraps an injected SQLAlchemy session factory and opens one
session per operation. SQLAlchemy faults never leave this module: they are
rolled back and re-raised as StorageWriteError / StorageReadError.

Profile replacement is a single INSERT ... ON CONFLICT DO UPDATE against the
fixed profile row, so a reader sees either the old or the new profile and
never an empty table once a save has committed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.errors import StorageReadError, StorageWriteError, require_text
from app.models import PROFILE_ROW_ID, SOURCES_SEPARATOR, Post, Profile, utc_now

logger = logging.getLogger(__name__)

PROFILE_REQUIRED_MESSAGE = "Full Name and Occupation are required!"
HEADING_REQUIRED_MESSAGE = "Post heading is required!"

# Range of SQLite INTEGER (signed 64-bit)
SQLITE_MIN_INT = -(2**63)
SQLITE_MAX_INT = 2**63 - 1


def join_sources(sources: Sequence[str] | str | None) -> str | None:
    """Serialize source reference paths for the posts.sources column.

    Args:
        sources: List of reference paths, an already joined string, or None.

    Returns:
        Comma-joined paths, or None when there are no sources.
    """
    if sources is None:
        return None
    if isinstance(sources, str):
        return sources or None
    return SOURCES_SEPARATOR.join(sources) or None


class RecordStore:
    """Profile and post storage over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # --- Profile ---

    def save_profile(
        self,
        full_name: str | None,
        occupation: str | None,
        phone: str | None = None,
        address: str | None = None,
        state: str | None = None,
        country: str | None = None,
    ) -> None:
        """Replace the singleton profile.

        Every column is overwritten; optional fields not given become NULL.

        Raises:
            ValidationError: If full_name or occupation is missing or empty.
            StorageWriteError: If the upsert fails. The previous profile is kept.
        """
        require_text(full_name, PROFILE_REQUIRED_MESSAGE)
        require_text(occupation, PROFILE_REQUIRED_MESSAGE)

        values = {
            "id": PROFILE_ROW_ID,
            "full_name": full_name,
            "occupation": occupation,
            "phone": phone,
            "address": address,
            "state": state,
            "country": country,
            "updated_at": utc_now(),
        }
        stmt = sqlite_insert(Profile).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Profile.id],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )

        with self._session_factory() as session:
            try:
                session.execute(stmt)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageWriteError(f"profile upsert failed: {e}") from e

        logger.info("Profile saved")

    def get_profile(self) -> Profile:
        """Return the saved profile, or Profile.empty() if none was ever saved.

        Raises:
            StorageReadError: If the query fails.
        """
        with self._session_factory() as session:
            try:
                profile = session.get(Profile, PROFILE_ROW_ID)
            except SQLAlchemyError as e:
                raise StorageReadError(f"profile query failed: {e}") from e

        if profile is None:
            return Profile.empty()
        return profile

    # --- Posts ---

    def publish_post(
        self,
        heading: str | None,
        audio: str | None = None,
        sources: Sequence[str] | str | None = None,
        links: str | None = None,
    ) -> int:
        """Insert a new post.

        Args:
            heading: Required post heading.
            audio: Reference path of the audio blob, if any.
            sources: Reference paths of the source blobs, in upload order.
            links: Free text links, stored unvalidated.

        Returns:
            The new post id.

        Raises:
            ValidationError: If heading is missing or empty.
            StorageWriteError: If the insert fails.
        """
        require_text(heading, HEADING_REQUIRED_MESSAGE)

        post = Post(
            heading=heading,
            audio=audio or None,
            sources=join_sources(sources),
            links=links,
        )

        with self._session_factory() as session:
            try:
                session.add(post)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageWriteError(f"post insert failed: {e}") from e

        logger.info("Published post id=%d", post.id)
        return post.id

    def list_posts(self) -> list[Post]:
        """Return all posts, newest (highest id) first.

        Raises:
            StorageReadError: If the query fails.
        """
        stmt = select(Post).order_by(Post.id.desc())
        with self._session_factory() as session:
            try:
                return list(session.execute(stmt).scalars().all())
            except SQLAlchemyError as e:
                raise StorageReadError(f"post query failed: {e}") from e

    def delete_post(self, post_id: int) -> bool:
        """Delete a post by id. Deleting an unknown id is a no-op.

        Referenced blobs are left in place.

        Returns:
            True if a row was removed, False if no post had that id.

        Raises:
            StorageWriteError: If the delete fails.
        """
        if not SQLITE_MIN_INT <= post_id <= SQLITE_MAX_INT:
            # No row can carry an id SQLite cannot even bind
            logger.debug("Delete of out-of-range post id=%d ignored", post_id)
            return False

        stmt = delete(Post).where(Post.id == post_id)
        with self._session_factory() as session:
            try:
                result = session.execute(stmt)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageWriteError(f"post delete failed: {e}") from e

        removed = result.rowcount > 0
        if removed:
            logger.info("Deleted post id=%d", post_id)
        else:
            logger.debug("Delete of unknown post id=%d ignored", post_id)
        return removed
