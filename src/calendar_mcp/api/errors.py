from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    INVALID_REQUEST = "InvalidRequest"
    METHOD_NOT_FOUND = "MethodNotFound"
    INTERNAL_ERROR = "InternalError"


class ToolCallError(RuntimeError):
    """Typed failure surfaced to the transport."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def invalid_request(cls, message: str) -> "ToolCallError":
        return cls(ErrorCode.INVALID_REQUEST, message)

    @classmethod
    def method_not_found(cls, message: str) -> "ToolCallError":
        return cls(ErrorCode.METHOD_NOT_FOUND, message)

    @classmethod
    def internal_error(cls, message: str) -> "ToolCallError":
        return cls(ErrorCode.INTERNAL_ERROR, message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
