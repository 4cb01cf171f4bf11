"""
Chain client interface.

The execution engine only ever talks to a ChainClient; concrete clients
(Octra REST, EVM JSON-RPC) own the HTTP transport, signing, and the
account's nonce counter.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional


class ChainError(RuntimeError):
    """Transport failure, node rejection, revert, or confirmation timeout."""

    TRANSPORT = "transport"
    REJECTED = "rejected"
    REVERTED = "reverted"
    TIMEOUT = "timeout"

    def __init__(self, message: str, kind: str = TRANSPORT, tx_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.tx_id = tx_id


@dataclass(frozen=True)
class Balance:
    amount: Decimal
    nonce: int
    unit: str = ""

    def __str__(self) -> str:
        return f"{self.amount:.6f} {self.unit}".rstrip()


class ChainClient(abc.ABC):
    """
    Read and write access to one contract on behalf of one account.

    ``submit_transaction`` must not return until a transaction identifier is
    known (or a bounded wait has elapsed, in which case it raises).
    """

    def __init__(self, contract: str, address: str) -> None:
        self.contract = contract
        self.address = address

    @abc.abstractmethod
    def query(self, method_name: str, args: Mapping[str, Any]) -> Any:
        """Run a read-only call and return the decoded value."""

    @abc.abstractmethod
    def submit_transaction(self, method_name: str, args: Mapping[str, Any]) -> str:
        """Sign and submit a state-changing call; return its transaction id."""

    @abc.abstractmethod
    def get_balance(self, address: Optional[str] = None) -> Balance:
        """Balance and nonce for ``address`` (default: the client's account)."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "ChainClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
