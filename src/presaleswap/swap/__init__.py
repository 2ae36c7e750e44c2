"""Swap orchestration for the presale deposit.

Provides:
- PresaleSwapProvider: quote, fee, swap creation and step-by-step execution
- SwapStateMachine and its components
- Swap / Quote models and the status display table
"""

from presaleswap.swap.approval import ApprovalManager
from presaleswap.swap.base import SwapProvider
from presaleswap.swap.confirmations import ConfirmationPoller
from presaleswap.swap.display import STATUS_DISPLAY, StatusDisplay
from presaleswap.swap.executor import SwapExecutor
from presaleswap.swap.fees import FeeEstimator, InvalidTxTypeError
from presaleswap.swap.models import InvalidTransitionError, Quote, Swap, SwapStatus, TxType
from presaleswap.swap.provider import PresaleSwapProvider
from presaleswap.swap.quotes import QuoteEngine
from presaleswap.swap.runner import SwapRunner
from presaleswap.swap.state_machine import SwapStateMachine

__all__ = [
    # Provider
    "PresaleSwapProvider",
    "SwapProvider",
    "SwapRunner",
    # Components
    "ApprovalManager",
    "ConfirmationPoller",
    "FeeEstimator",
    "QuoteEngine",
    "SwapExecutor",
    "SwapStateMachine",
    # Models
    "InvalidTransitionError",
    "InvalidTxTypeError",
    "Quote",
    "Swap",
    "SwapStatus",
    "TxType",
    "STATUS_DISPLAY",
    "StatusDisplay",
]
