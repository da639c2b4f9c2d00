"""Operation catalog and argument schemas shared by every transport."""

from __future__ import annotations

from .errors import ErrorCode, ToolCallError
from .registry import OperationSpec, describe_write, get_operation, get_operations, is_read_only

# Import handlers so decorators run at module import time.
from . import handlers  # noqa: F401

__all__ = [
    "ErrorCode",
    "OperationSpec",
    "ToolCallError",
    "describe_write",
    "get_operation",
    "get_operations",
    "is_read_only",
]
