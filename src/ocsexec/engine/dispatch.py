"""
Invocation Dispatcher - route one method to a query or a transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import InvocationError
from ..pneuma.client import ChainClient
from ..spec.models import MethodSpec, Mutability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallResult:
    method: str
    mutability: Mutability
    payload: Any


def invoke(method: MethodSpec, args: Mapping[str, Any], chain_client: ChainClient) -> CallResult:
    """
    Invoke ``method`` once through ``chain_client``.

    Read methods return the client's query value untouched. Write methods
    return the transaction id reported by the client.

    Raises:
        InvocationError: On any client failure (cause attached) or when a
                         write yields no transaction id. Never retries.
    """
    if method.mutability is Mutability.READ:
        logger.debug("query %s(%s)", method.name, dict(args))
        try:
            payload = chain_client.query(method.name, args)
        except Exception as exc:  # noqa: BLE001
            raise InvocationError(str(exc) or type(exc).__name__, cause=exc) from exc
        return CallResult(method=method.name, mutability=method.mutability, payload=payload)

    if method.mutability is Mutability.WRITE:
        logger.debug("transaction %s(%s)", method.name, dict(args))
        try:
            tx_id = chain_client.submit_transaction(method.name, args)
        except Exception as exc:  # noqa: BLE001
            raise InvocationError(str(exc) or type(exc).__name__, cause=exc) from exc
        if not tx_id:
            raise InvocationError("node accepted the call but returned no transaction id")
        return CallResult(method=method.name, mutability=method.mutability, payload=tx_id)

    raise InvocationError(f"{method.name}: unsupported mutability {method.mutability!r}")


class InvocationDispatcher:
    def __init__(self, chain_client: ChainClient) -> None:
        self.chain_client = chain_client

    def invoke(self, method: MethodSpec, args: Mapping[str, Any]) -> CallResult:
        return invoke(method, args, self.chain_client)
