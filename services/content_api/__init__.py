"""Studio Backend - Content API service.

FastAPI service for the singleton profile and the post list
(multipart uploads + SQLite rows).
"""

__all__: list[str] = []
