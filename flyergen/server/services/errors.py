"""Errors raised by the server service layer."""

from typing import List

INSUFFICIENT_CREDITS_MESSAGE = "Insufficient credits. Please upgrade your plan."
UPSCALE_CREDITS_MESSAGE = "Insufficient credits. Please upgrade your plan to use the upscaler."


class InsufficientCreditsError(Exception):
    """The user has no credits left for a metered operation."""

    def __init__(self, message: str = INSUFFICIENT_CREDITS_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class MissingEventDetailsError(Exception):
    """Required questions of the chosen event type were left unanswered."""

    def __init__(self, event_type: str, missing: List[str]) -> None:
        self.event_type = event_type
        self.missing = missing
        self.message = f"Missing required event details: {', '.join(missing)}"
        super().__init__(self.message)
