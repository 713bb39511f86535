"""Studio Backend - Submission coordination.

Glues validation, blob persistence and row persistence into one logical
unit per request:
- Required fields are checked before any side effect
- Blob writes happen before the row insert; a failed blob write means no row
- Blobs of a submission whose row insert failed are discarded

Stateless: every call is a single-shot exchange, nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from app.blobs import BlobStore, Upload
from app.errors import StorageWriteError, require_text
from app.records import HEADING_REQUIRED_MESSAGE, PROFILE_REQUIRED_MESSAGE, RecordStore

logger = logging.getLogger(__name__)

AUDIO_FIELD = "audio"
SOURCES_FIELD = "sources"


@dataclass
class ProfileSubmission:
    """Form fields of a profile save."""

    full_name: str | None
    occupation: str | None
    phone: str | None = None
    address: str | None = None
    state: str | None = None
    country: str | None = None


@dataclass
class PostSubmission:
    """Form fields of a post publish (files are passed separately)."""

    heading: str | None
    links: str | None = None


def _selected_uploads(uploads: Iterable[Upload] | None) -> list[Upload]:
    """Drop empty file parts (a file input left blank still sends a part)."""
    if not uploads:
        return []
    return [upload for upload in uploads if upload.filename]


class SubmissionCoordinator:
    """Validates submissions and persists their blobs and rows."""

    def __init__(self, blob_store: BlobStore, record_store: RecordStore):
        self.blob_store = blob_store
        self.record_store = record_store

    def submit_profile(self, submission: ProfileSubmission) -> None:
        """Validate and save the profile, replacing any previous one.

        Raises:
            ValidationError: If full_name or occupation is missing.
            StorageWriteError: If the save fails.
        """
        require_text(submission.full_name, PROFILE_REQUIRED_MESSAGE)
        require_text(submission.occupation, PROFILE_REQUIRED_MESSAGE)

        self.record_store.save_profile(
            full_name=submission.full_name,
            occupation=submission.occupation,
            phone=submission.phone,
            address=submission.address,
            state=submission.state,
            country=submission.country,
        )

    def submit_post(
        self,
        submission: PostSubmission,
        audio: Iterable[Upload] | None = None,
        sources: Iterable[Upload] | None = None,
    ) -> int:
        """Validate, store attached files, then publish the post.

        Args:
            submission: Heading and links.
            audio: Uploads under the "audio" field; only the first is kept.
            sources: Uploads under the "sources" field, in submission order.

        Returns:
            The new post id.

        Raises:
            ValidationError: If heading is missing (no file is written).
            StorageWriteError: If a blob write or the row insert fails.
        """
        require_text(submission.heading, HEADING_REQUIRED_MESSAGE)

        audio_uploads = _selected_uploads(audio)
        source_uploads = _selected_uploads(sources)
        if len(audio_uploads) > 1:
            logger.warning("Ignoring %d extra audio uploads", len(audio_uploads) - 1)

        written: list[str] = []
        try:
            audio_refs = self.blob_store.store_many(AUDIO_FIELD, audio_uploads[:1])
            written.extend(audio_refs)
            source_refs = self.blob_store.store_many(SOURCES_FIELD, source_uploads)
            written.extend(source_refs)

            post_id = self.record_store.publish_post(
                heading=submission.heading,
                audio=audio_refs[0] if audio_refs else None,
                sources=source_refs or None,
                links=submission.links,
            )
        except StorageWriteError:
            removed = self.blob_store.discard_all(written)
            if removed:
                logger.info("Discarded %d blobs of failed post submission", removed)
            raise

        return post_id
