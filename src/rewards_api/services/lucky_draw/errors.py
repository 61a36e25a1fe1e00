"""Exceptions raised by the lucky-draw engine."""

from __future__ import annotations


class LuckyDrawError(RuntimeError):
    """Base class carrying a machine-readable code and an HTTP status."""

    code = "LUCKY_DRAW_ERROR"
    status_code = 500
    public_message = "Lucky draw is temporarily unavailable"

    @property
    def user_actionable(self) -> bool:
        return self.status_code < 500

    @property
    def response_message(self) -> str:
        """Message safe to return to clients."""

        return str(self) if self.user_actionable else self.public_message


class InvalidArgumentError(LuckyDrawError):
    code = "VALIDATION_ERROR"
    status_code = 400


class InsufficientChancesError(LuckyDrawError):
    code = "INSUFFICIENT_CHANCES"
    status_code = 400

    def __init__(self, message: str = "No remaining chances") -> None:
        super().__init__(message)


class NoPrizesConfiguredError(LuckyDrawError):
    code = "NO_PRIZES_CONFIGURED"
    status_code = 500

    def __init__(self, message: str = "No available prizes configured") -> None:
        super().__init__(message)


class InvalidDistributionError(LuckyDrawError):
    code = "INVALID_DISTRIBUTION"
    status_code = 500


class StockSelectionExhaustedError(LuckyDrawError):
    code = "STOCK_SELECTION_EXHAUSTED"
    status_code = 503
    public_message = "Prize stock changed while drawing, please try again"


__all__ = [
    "InsufficientChancesError",
    "InvalidArgumentError",
    "InvalidDistributionError",
    "LuckyDrawError",
    "NoPrizesConfiguredError",
    "StockSelectionExhaustedError",
]
