"""
Module: service

Purpose:
    Job orchestration around the engine: uploads are rasterized and
    stored, merge requests are validated, merged and stored, and jobs can
    be cleaned up.

Key Classes:
    - PatternService: Upload/merge/cleanup
    - ServiceConfig: Service configuration
    - MergeRequest, MergeRequestError: Request validation
"""

from .config import ServiceConfig
from .jobs import PatternService, PageInfo, UploadResult, MergeResult
from .validation import (
    MergeRequest,
    MergeCell,
    MergeRequestError,
    parse_merge_request,
    NO_PAGES_SELECTED,
)
from .sse import format_sse

__all__ = [
    "ServiceConfig",
    "PatternService",
    "PageInfo",
    "UploadResult",
    "MergeResult",
    "MergeRequest",
    "MergeCell",
    "MergeRequestError",
    "parse_merge_request",
    "NO_PAGES_SELECTED",
    "format_sse",
]
