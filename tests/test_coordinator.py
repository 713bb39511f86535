"""Tests for services.content_api.coordinator."""

import io
from unittest import mock

import pytest

from app.blobs import Upload
from app.errors import StorageWriteError, ValidationError
from services.content_api.coordinator import PostSubmission, ProfileSubmission


def _uploads(*names):
    return [Upload(name, io.BytesIO(f"content of {name}".encode())) for name in names]


class TestSubmitProfile:
    """Tests for SubmissionCoordinator.submit_profile."""

    def test_saves_profile(self, coordinator, record_store):
        """A valid submission replaces the profile."""
        coordinator.submit_profile(
            ProfileSubmission(full_name="Ada", occupation="Analyst", country="UK")
        )

        profile = record_store.get_profile()
        assert profile.full_name == "Ada"
        assert profile.country == "UK"

    def test_missing_field_never_reaches_store(self, blob_store):
        """Validation happens before the record store is called."""
        from services.content_api.coordinator import SubmissionCoordinator

        records = mock.MagicMock()
        coordinator = SubmissionCoordinator(blob_store, records)

        with pytest.raises(ValidationError):
            coordinator.submit_profile(ProfileSubmission(full_name="Ada", occupation=""))

        records.save_profile.assert_not_called()


class TestSubmitPost:
    """Tests for SubmissionCoordinator.submit_post."""

    def test_text_only_post(self, coordinator, record_store, blob_store):
        """No files: audio and sources stay null and nothing is written."""
        post_id = coordinator.submit_post(PostSubmission(heading="Episode 1", links="http://a"))

        post = record_store.list_posts()[0]
        assert post.id == post_id
        assert post.audio is None
        assert post.sources is None
        assert post.links == "http://a"
        assert not blob_store.root.exists() or list(blob_store.root.iterdir()) == []

    def test_audio_and_three_sources(self, coordinator, record_store, blob_store):
        """One audio and three sources are stored and referenced in order."""
        coordinator.submit_post(
            PostSubmission(heading="Episode 2"),
            audio=_uploads("ep2.mp3"),
            sources=_uploads("one.pdf", "two.pdf", "three.pdf"),
        )

        post = record_store.list_posts()[0]
        assert post.audio.startswith("/uploads/")
        assert blob_store.resolve(post.audio).read_bytes() == b"content of ep2.mp3"
        assert len(post.source_paths) == 3
        for ref, name in zip(post.source_paths, ["one.pdf", "two.pdf", "three.pdf"]):
            assert ref.endswith(f"-{name}")
            assert blob_store.resolve(ref).read_bytes() == f"content of {name}".encode()

    def test_only_first_audio_kept(self, coordinator, record_store, blob_store):
        """Extra audio uploads are ignored and not written."""
        coordinator.submit_post(
            PostSubmission(heading="Ep"), audio=_uploads("first.mp3", "second.mp3")
        )

        post = record_store.list_posts()[0]
        assert post.audio.endswith("-first.mp3")
        assert len(list(blob_store.root.iterdir())) == 1

    def test_empty_file_parts_skipped(self, coordinator, record_store):
        """Parts with no filename (blank file inputs) are not stored."""
        coordinator.submit_post(
            PostSubmission(heading="Ep"),
            audio=[Upload("", io.BytesIO(b""))],
            sources=[Upload(None, io.BytesIO(b"")), *_uploads("real.txt")],
        )

        post = record_store.list_posts()[0]
        assert post.audio is None
        assert len(post.source_paths) == 1

    def test_missing_heading_writes_nothing(self, coordinator, record_store, blob_store):
        """Validation fails before any blob is written."""
        with pytest.raises(ValidationError, match="Post heading is required!"):
            coordinator.submit_post(
                PostSubmission(heading=""),
                audio=_uploads("ep.mp3"),
                sources=_uploads("a.pdf"),
            )

        assert record_store.list_posts() == []
        assert not blob_store.root.exists()

    def test_blob_failure_creates_no_row(self, coordinator, record_store, blob_store):
        """A failed source write aborts before the row and discards the audio blob."""
        real_store = blob_store.store

        def failing_store(field_name, filename, stream):
            if field_name == "sources":
                raise StorageWriteError("disk full")
            return real_store(field_name, filename, stream)

        with mock.patch.object(blob_store, "store", side_effect=failing_store):
            with pytest.raises(StorageWriteError):
                coordinator.submit_post(
                    PostSubmission(heading="Ep"),
                    audio=_uploads("ep.mp3"),
                    sources=_uploads("a.pdf"),
                )

        assert record_store.list_posts() == []
        assert list(blob_store.root.iterdir()) == []

    def test_row_failure_discards_blobs(self, coordinator, record_store, blob_store):
        """If the insert fails, the submission's blobs are removed."""
        with mock.patch.object(
            record_store, "publish_post", side_effect=StorageWriteError("db locked")
        ):
            with pytest.raises(StorageWriteError):
                coordinator.submit_post(
                    PostSubmission(heading="Ep"),
                    audio=_uploads("ep.mp3"),
                    sources=_uploads("a.pdf", "b.pdf"),
                )

        assert list(blob_store.root.iterdir()) == []
