"""Studio Backend - Content API FastAPI application.

Endpoints for saving/reading the profile and publishing/listing/deleting
posts. Uploaded blobs are served read-only under config.UPLOADS_URL_PREFIX.

Run with:
    python -m services.content_api
    uvicorn services.content_api.main:app --reload  # dev server only
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import ValidationError as PydanticValidationError

from app.blobs import BlobStore, Upload
from app.config import API_PREFIX, UPLOADS_DIR, UPLOADS_URL_PREFIX
from app.db import init_db
from app.errors import StoreError, StoreErrorCode, ValidationError
from app.records import RecordStore
from app.schemas import (
    ErrorResponse,
    MessageResponse,
    PostResponse,
    ProfileRequest,
    ProfileResponse,
    PublishResponse,
)
from services.content_api.coordinator import (
    PostSubmission,
    ProfileSubmission,
    SubmissionCoordinator,
)

logger = logging.getLogger(__name__)

# --- Store Setup ---

# Module-level stores (initialized on startup)
_record_store: RecordStore | None = None
_blob_store: BlobStore | None = None


def get_record_store() -> RecordStore:
    """Dependency that provides the record store.

    Raises:
        RuntimeError: If the store is not initialized (app lifespan not invoked).
    """
    if _record_store is None:
        raise RuntimeError("Record store not initialized. App lifespan not invoked?")
    return _record_store


def get_blob_store() -> BlobStore:
    """Dependency that provides the blob store."""
    global _blob_store
    if _blob_store is None:
        _blob_store = BlobStore(UPLOADS_DIR, UPLOADS_URL_PREFIX)
    return _blob_store


def get_coordinator(
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    record_store: Annotated[RecordStore, Depends(get_record_store)],
) -> SubmissionCoordinator:
    """Dependency that provides a submission coordinator."""
    return SubmissionCoordinator(blob_store, record_store)


# --- Lifespan ---


def _cleanup_orphan_temp_files_safe(blob_store: BlobStore) -> None:
    """Clean up interrupted upload writes on startup (best-effort)."""
    try:
        removed = blob_store.cleanup_temp_files()
        if removed > 0:
            logger.info("Startup cleanup: removed %d orphan temp files", removed)
    except Exception:
        # Best-effort: never crash startup
        logger.warning("Startup cleanup failed (non-fatal)", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Initializes the database, creates the upload root, and cleans up orphan
    temp files.
    """
    global _record_store
    engine = None
    if _record_store is None:
        engine, session_factory = init_db()
        _record_store = RecordStore(session_factory)

    blob_store = get_blob_store()
    blob_store.ensure_root()
    _cleanup_orphan_temp_files_safe(blob_store)

    yield

    if engine is not None:
        engine.dispose()


# --- FastAPI App ---


app = FastAPI(
    title="Studio Backend - Content API",
    description="Profile and post persistence with file uploads.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error Handling ---


def error_code_to_status(error_code: str) -> int:
    """Map error codes to HTTP status codes.

    - VALIDATION_FAILED -> 400
    - STORAGE_WRITE_FAILED / STORAGE_READ_FAILED -> 500
    """
    if error_code == StoreErrorCode.VALIDATION_FAILED:
        return 400
    return 500


def make_error_response(error_code: str, message: str) -> JSONResponse:
    """Create a JSON error response."""
    return JSONResponse(
        status_code=error_code_to_status(error_code),
        content=ErrorResponse(message=message, error_code=error_code).model_dump(),
    )


def handle_store_error(e: StoreError, public_message: str) -> JSONResponse:
    """Turn a store error into a response.

    Validation messages are returned as-is; storage faults are logged in full
    and reported with public_message only.
    """
    if isinstance(e, ValidationError):
        return make_error_response(e.error_code, e.message)
    logger.error("%s: %s", public_message, e.message, exc_info=e)
    return make_error_response(e.error_code, public_message)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests (e.g. a non-integer post id) as 400."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return make_error_response(StoreErrorCode.VALIDATION_FAILED, f"Invalid request: {details}")


# --- Endpoints ---

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing required field"},
    500: {"model": ErrorResponse, "description": "Storage fault"},
}


def _as_uploads(files: list[UploadFile] | None) -> list[Upload]:
    if not files:
        return []
    return [Upload(filename=f.filename, stream=f.file) for f in files]


_PROFILE_BODY_SCHEMA = {"schema": ProfileRequest.model_json_schema(by_alias=True)}


async def read_profile_submission(request: Request) -> ProfileSubmission:
    """Dependency that reads a profile save from a JSON body or form fields.

    Raises:
        RequestValidationError: If a JSON body is malformed or has wrong types.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"}]
            ) from e
        try:
            payload = ProfileRequest.model_validate(body)
        except PydanticValidationError as e:
            raise RequestValidationError(e.errors(include_url=False)) from e
        return ProfileSubmission(**payload.model_dump())

    form = await request.form()
    payload = ProfileRequest.model_validate(
        {key: value for key, value in form.items() if isinstance(value, str) and value}
    )
    return ProfileSubmission(**payload.model_dump())


@app.post(
    f"{API_PREFIX}/profile",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Save the profile",
    description="Replace the profile with the submitted form fields or JSON body.",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": _PROFILE_BODY_SCHEMA,
                "application/x-www-form-urlencoded": _PROFILE_BODY_SCHEMA,
                "multipart/form-data": _PROFILE_BODY_SCHEMA,
            }
        }
    },
)
def save_profile(
    coordinator: Annotated[SubmissionCoordinator, Depends(get_coordinator)],
    submission: Annotated[ProfileSubmission, Depends(read_profile_submission)],
):
    """Save the profile. fullName and occupation are required."""
    try:
        coordinator.submit_profile(submission)
    except StoreError as e:
        return handle_store_error(e, "Error saving profile")
    except Exception:
        logger.exception("Unexpected error saving profile")
        return make_error_response(StoreErrorCode.STORAGE_WRITE_FAILED, "Error saving profile")
    return MessageResponse(message="Profile saved successfully!")


@app.get(
    f"{API_PREFIX}/profile",
    response_model=ProfileResponse,
    responses={500: _ERROR_RESPONSES[500]},
    summary="Get the profile",
    description="Return the saved profile, or an all-empty profile if none exists.",
)
def get_profile(record_store: Annotated[RecordStore, Depends(get_record_store)]):
    """Get the profile."""
    try:
        profile = record_store.get_profile()
    except StoreError as e:
        return handle_store_error(e, "Error fetching profile")
    except Exception:
        logger.exception("Unexpected error fetching profile")
        return make_error_response(StoreErrorCode.STORAGE_READ_FAILED, "Error fetching profile")
    return ProfileResponse.model_validate(profile)


@app.post(
    f"{API_PREFIX}/posts",
    response_model=PublishResponse,
    responses=_ERROR_RESPONSES,
    summary="Publish a post",
    description="Publish a post with an optional audio file and source files.",
)
def publish_post(
    coordinator: Annotated[SubmissionCoordinator, Depends(get_coordinator)],
    heading: Annotated[str | None, Form()] = None,
    links: Annotated[str | None, Form()] = None,
    audio: Annotated[list[UploadFile] | None, File(description="Audio file (0-1)")] = None,
    sources: Annotated[list[UploadFile] | None, File(description="Source files (0-N)")] = None,
):
    """Publish a post.

    Accepts multipart form data with:
    - heading: Post heading (required)
    - links: Free text links
    - audio: One audio file
    - sources: Any number of source files
    """
    submission = PostSubmission(heading=heading, links=links)
    try:
        post_id = coordinator.submit_post(
            submission,
            audio=_as_uploads(audio),
            sources=_as_uploads(sources),
        )
    except StoreError as e:
        return handle_store_error(e, "Error saving post")
    except Exception:
        logger.exception("Unexpected error saving post")
        return make_error_response(StoreErrorCode.STORAGE_WRITE_FAILED, "Error saving post")
    return PublishResponse(message="Post published successfully!", id=post_id)


@app.get(
    f"{API_PREFIX}/posts",
    response_model=list[PostResponse],
    responses={500: _ERROR_RESPONSES[500]},
    summary="List posts",
    description="Return all posts, newest first.",
)
def list_posts(record_store: Annotated[RecordStore, Depends(get_record_store)]):
    """List posts, newest first."""
    try:
        posts = record_store.list_posts()
    except StoreError as e:
        return handle_store_error(e, "Error fetching posts")
    except Exception:
        logger.exception("Unexpected error fetching posts")
        return make_error_response(StoreErrorCode.STORAGE_READ_FAILED, "Error fetching posts")
    return [PostResponse.model_validate(post) for post in posts]


@app.delete(
    f"{API_PREFIX}/posts/{{post_id}}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a post",
    description="Delete a post by id. Unknown ids are accepted silently.",
)
def delete_post(
    post_id: int,
    record_store: Annotated[RecordStore, Depends(get_record_store)],
):
    """Delete a post. Its files stay in the upload directory."""
    try:
        record_store.delete_post(post_id)
    except StoreError as e:
        return handle_store_error(e, "Failed to delete post")
    except Exception:
        logger.exception("Unexpected error deleting post %d", post_id)
        return make_error_response(StoreErrorCode.STORAGE_WRITE_FAILED, "Failed to delete post")
    return MessageResponse(message="Post deleted successfully!")


@app.get(f"{UPLOADS_URL_PREFIX}/{{blob_name}}", include_in_schema=False)
def serve_blob(blob_name: str, blob_store: Annotated[BlobStore, Depends(get_blob_store)]):
    """Serve a stored blob read-only at its reference path."""
    path = blob_store.locate(blob_name)
    if path is None:
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path)


@app.get("/health", summary="Health check")
def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}


# --- For testing: allow overriding stores ---


def override_stores(
    record_store: RecordStore | None = None, blob_store: BlobStore | None = None
) -> None:
    """Override the module-level stores for testing."""
    global _record_store, _blob_store
    _record_store = record_store
    _blob_store = blob_store
