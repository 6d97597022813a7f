"""Error types and classification for chat command failures."""

from enum import Enum

from pydantic import BaseModel


class DatabaseError(RuntimeError):
    """Raised when the record store cannot complete an operation."""


class RecordNotFoundError(KeyError):
    """Raised when a record addressed by id does not exist."""


class CommandUsageError(ValueError):
    """Raised when a chat command is missing its argument or the argument is malformed.

    The message is the usage hint shown back to the member.
    """

    def __init__(self, usage: str) -> None:
        super().__init__(usage)
        self.usage = usage


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_STORAGE = "ERR_STORAGE"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    severity: ErrorSeverity


def classify_command_error(exception: Exception, *, action: str = "processing your command") -> ErrorResponse:
    """Classify a command failure and build the reply shown to the member.

    Args:
        exception: The exception raised while handling the command
        action: Short description of what was being done, used in generic failure replies

    Returns:
        ErrorResponse with code, message, and severity
    """
    if isinstance(exception, CommandUsageError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_INPUT,
            message=exception.usage,
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, RecordNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=f"❌ Could not find what you were looking for while {action}.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE,
            message=f"❌ An error occurred while {action}.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message=f"❌ An unexpected error occurred while {action}.",
        severity=ErrorSeverity.MEDIUM,
    )
