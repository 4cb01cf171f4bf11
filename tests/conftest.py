from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional

import pytest

from ocsexec.pneuma.client import Balance, ChainClient, ChainError
from ocsexec.spec.models import MethodSpec, Mutability, ParamSpec, Schema

WALLET_ADDRESS = "oct1abcDEFghiJKLmnoPQRstuVWXyz0123456789abcdef"
CONTRACT_ADDRESS = "oct5MrNfjiXFNRDLwsodvAmLMAWRpp4yiNcrb2Cc1Jzs9xd"


class FakeChainClient(ChainClient):
    """In-memory chain client: scripted query results, sequential tx hashes."""

    def __init__(
        self,
        query_results: Optional[dict[str, Any]] = None,
        failures: Optional[dict[str, BaseException]] = None,
        tx_prefix: str = "tx",
    ) -> None:
        super().__init__(contract=CONTRACT_ADDRESS, address=WALLET_ADDRESS)
        self.query_results = query_results or {}
        self.failures = failures or {}
        self.tx_prefix = tx_prefix
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False

    def _maybe_fail(self, method_name: str) -> None:
        failure = self.failures.get(method_name)
        if failure is not None:
            raise failure

    def query(self, method_name: str, args: Mapping[str, Any]) -> Any:
        self.calls.append(("query", method_name, dict(args)))
        self._maybe_fail(method_name)
        return self.query_results.get(method_name)

    def submit_transaction(self, method_name: str, args: Mapping[str, Any]) -> str:
        self.calls.append(("tx", method_name, dict(args)))
        self._maybe_fail(method_name)
        return f"{self.tx_prefix}{len(self.calls):04d}"

    def get_balance(self, address: Optional[str] = None) -> Balance:
        return Balance(amount=Decimal("12.5"), nonce=7, unit="OCT")

    def close(self) -> None:
        self.closed = True


class FlakyChainClient(FakeChainClient):
    """Fails the first ``fail_times`` transaction submissions."""

    def __init__(self, fail_times: int) -> None:
        super().__init__()
        self.fail_times = fail_times

    def submit_transaction(self, method_name: str, args: Mapping[str, Any]) -> str:
        self.calls.append(("tx", method_name, dict(args)))
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ChainError("connection reset", kind=ChainError.TRANSPORT)
        return "0xflaky"


def read_method(name: str, *params: ParamSpec, label: Optional[str] = None) -> MethodSpec:
    return MethodSpec(name=name, mutability=Mutability.READ, params=tuple(params), label=label)


def write_method(name: str, *params: ParamSpec, label: Optional[str] = None) -> MethodSpec:
    return MethodSpec(name=name, mutability=Mutability.WRITE, params=tuple(params), label=label)


@pytest.fixture()
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture()
def greeting_claim_schema() -> Schema:
    return Schema(
        methods=(
            read_method("greeting"),
            write_method("claim", ParamSpec(name="amount", type_tag="integer")),
        ),
        contract=CONTRACT_ADDRESS,
    )
