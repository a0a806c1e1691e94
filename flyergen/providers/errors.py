"""Error types for the image provider layer.

Every provider failure surfaces as an ``ImageGenerationError`` carrying an
``ErrorCode``, the provider that raised it, and whether retrying the same
provider may succeed. The fallback manager relies on ``code`` and
``retryable`` to decide between retrying, falling back and failing fast.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Provider failure codes."""

    # Authentication
    INVALID_API_KEY = "INVALID_API_KEY"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Request validation
    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    PROMPT_TOO_LONG = "PROMPT_TOO_LONG"
    UNSUPPORTED_ASPECT_RATIO = "UNSUPPORTED_ASPECT_RATIO"

    # Quota and billing
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    RATE_LIMITED = "RATE_LIMITED"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"

    # Service
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    GENERATION_FAILED = "GENERATION_FAILED"

    # Transport
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ImageGenerationError(Exception):
    """Base error for image generation failures.

    Args:
        message: Human-readable error description.
        code: Failure code.
        provider: Identifier of the provider that failed.
        retryable: Whether the same provider may succeed on retry.
        original_error: The underlying exception, when there is one.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        provider: str,
        retryable: bool = False,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.provider = provider
        self.retryable = retryable
        self.original_error = original_error

    def __repr__(self) -> str:
        return (
            f"ImageGenerationError(code={self.code.value}, provider={self.provider!r}, "
            f"retryable={self.retryable}, message={self.message!r})"
        )
