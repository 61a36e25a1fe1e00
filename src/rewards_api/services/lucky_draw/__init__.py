"""Lucky-draw spin engine."""

from .catalog import PrizeCatalog
from .errors import (
    InsufficientChancesError,
    InvalidArgumentError,
    InvalidDistributionError,
    LuckyDrawError,
    NoPrizesConfiguredError,
    StockSelectionExhaustedError,
)
from .fulfillment import DEFAULT_PRIZE_ROUTES, FulfillmentKind, FulfillmentOutcome, RewardFulfillment
from .ledger import ChanceLedger
from .reservation import StockReservation
from .selector import FixedRandomSource, RandomSource, select_weighted
from .service import LuckyDrawService, SpinResult, SpinState

__all__ = [
    "ChanceLedger",
    "DEFAULT_PRIZE_ROUTES",
    "FixedRandomSource",
    "FulfillmentKind",
    "FulfillmentOutcome",
    "InsufficientChancesError",
    "InvalidArgumentError",
    "InvalidDistributionError",
    "LuckyDrawError",
    "LuckyDrawService",
    "NoPrizesConfiguredError",
    "PrizeCatalog",
    "RandomSource",
    "RewardFulfillment",
    "SpinResult",
    "SpinState",
    "StockReservation",
    "select_weighted",
]
