"""Swap domain models: statuses, quotes and the durable swap record."""

from dataclasses import asdict, dataclass, fields, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class SwapStatus(str, Enum):
    """Status of a swap. Only ever advances along the declared order."""

    WAITING_FOR_APPROVE_CONFIRMATIONS = "WAITING_FOR_APPROVE_CONFIRMATIONS"
    APPROVE_CONFIRMED = "APPROVE_CONFIRMED"
    WAITING_FOR_SWAP_CONFIRMATIONS = "WAITING_FOR_SWAP_CONFIRMATIONS"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    @property
    def is_terminal(self) -> bool:
        return self in (SwapStatus.SUCCESS, SwapStatus.FAILED)

    def can_advance_to(self, other: "SwapStatus") -> bool:
        """Check whether moving to `other` keeps the status moving forward."""
        if self == other:
            return True
        if self.is_terminal:
            return False
        return other.rank > self.rank


_STATUS_RANK = {
    SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS: 0,
    SwapStatus.APPROVE_CONFIRMED: 1,
    SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS: 2,
    SwapStatus.SUCCESS: 3,
    SwapStatus.FAILED: 3,
}


class TxType(str, Enum):
    """Transaction types the provider can estimate fees for."""

    SWAP = "SWAP"


class InvalidTransitionError(ValueError):
    """Raised when an update would break the swap record's invariants."""

    pass


@dataclass(frozen=True)
class Quote:
    """A priced conversion. Amounts are base-unit integer strings."""

    from_asset: str
    to_asset: str
    from_amount: str
    to_amount: str
    fee: Optional[Decimal] = None  # gas price in gwei, chosen by the host
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None

    def for_accounts(
        self,
        from_account_id: str,
        to_account_id: Optional[str] = None,
        fee: Optional[Decimal] = None,
    ) -> "Quote":
        """Attach the wallet accounts (and optionally the fee) to the quote."""
        return replace(
            self,
            from_account_id=from_account_id,
            to_account_id=to_account_id or from_account_id,
            fee=fee if fee is not None else self.fee,
        )

    @property
    def rate(self) -> Decimal:
        if Decimal(self.from_amount) == 0:
            return Decimal("0")
        return Decimal(self.to_amount) / Decimal(self.from_amount)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["fee"] = str(self.fee) if self.fee is not None else None
        return data


@dataclass(frozen=True)
class Swap:
    """The durable swap record, as stored by the host.

    Never mutated in place: `apply` returns a new record.
    """

    id: str
    status: SwapStatus
    from_asset: str
    to_asset: str
    from_amount: str
    to_amount: str
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    fee: Optional[Decimal] = None
    slippage: Optional[int] = None  # basis points, informational
    approve_tx: Optional[dict] = None
    approve_tx_hash: Optional[str] = None
    swap_tx: Optional[dict] = None
    swap_tx_hash: Optional[str] = None
    end_time: Optional[int] = None  # epoch milliseconds

    def apply(self, updates: Optional[dict]) -> "Swap":
        """Merge a partial update returned by the state machine."""
        if not updates:
            return self

        unknown = set(updates) - {f.name for f in fields(self)}
        if unknown:
            raise InvalidTransitionError(f"Unknown swap fields: {sorted(unknown)}")

        if "from_amount" in updates and str(updates["from_amount"]) != self.from_amount:
            raise InvalidTransitionError("from_amount is fixed at swap creation")

        changes = dict(updates)
        if "status" in changes:
            status = SwapStatus(changes["status"])
            if not self.status.can_advance_to(status):
                raise InvalidTransitionError(
                    f"Swap {self.id} cannot move from {self.status.value} to {status.value}"
                )
            changes["status"] = status

        return replace(self, **changes)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def minimum_to_amount(self) -> str:
        """Slippage floor for display. Not enforced on chain."""
        from presaleswap.swap.quotes import calculate_slippage

        return calculate_slippage(self.to_amount, self.slippage or 0)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["fee"] = str(self.fee) if self.fee is not None else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Swap":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["status"] = SwapStatus(values["status"])
        if values.get("fee") is not None:
            values["fee"] = Decimal(str(values["fee"]))
        return cls(**values)
