"""Presentation metadata for swap statuses.

Consumed by the host's UI and notification layer. The state machine does
not read anything from here.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from presaleswap.chains import pretty_balance
from presaleswap.swap.models import Swap, SwapStatus


@dataclass(frozen=True)
class StatusDisplay:
    """How a status is shown in the swap timeline."""

    step: int
    label: str  # may contain {from} / {to}
    filter_status: str  # PENDING, COMPLETED or REFUNDED
    notification: Optional[Callable[[Swap], str]] = None


STATUS_DISPLAY: dict[SwapStatus, StatusDisplay] = {
    SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS: StatusDisplay(
        step=0,
        label="Approving {from}",
        filter_status="PENDING",
        notification=lambda swap: f"Approving {swap.from_asset}",
    ),
    SwapStatus.APPROVE_CONFIRMED: StatusDisplay(
        step=1,
        label="Swapping {from}",
        filter_status="PENDING",
    ),
    SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS: StatusDisplay(
        step=1,
        label="Swapping {from}",
        filter_status="PENDING",
        notification=lambda swap: "Engaging Origins",
    ),
    SwapStatus.SUCCESS: StatusDisplay(
        step=2,
        label="Completed",
        filter_status="COMPLETED",
        notification=lambda swap: (
            f"Swap completed, {pretty_balance(swap.to_amount, swap.to_asset)} "
            f"{swap.to_asset} ready to use"
        ),
    ),
    SwapStatus.FAILED: StatusDisplay(
        step=2,
        label="Swap Failed",
        filter_status="REFUNDED",
        notification=lambda swap: "Swap failed",
    ),
}

TIMELINE_DIAGRAM_STEPS = ("APPROVE", "SWAP")
TOTAL_STEPS = 3


def render_label(swap: Swap) -> str:
    """Label of the swap's current status with asset codes filled in."""
    label = STATUS_DISPLAY[swap.status].label
    return label.replace("{from}", swap.from_asset).replace("{to}", swap.to_asset)


def notification_for(swap: Swap) -> Optional[str]:
    """Notification message for the swap's current status, if any."""
    notification = STATUS_DISPLAY[swap.status].notification
    return notification(swap) if notification else None
