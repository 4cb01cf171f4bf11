"""
EVM JSON-RPC client.

Lightweight alternative to web3.py: httpx for HTTP, eth-abi for encoding,
eth-account for signing. Write calls block on the receipt so a reverted
transaction is reported as a failure rather than a bare hash.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Sequence

import httpx
from eth_abi import decode, encode
from eth_account.signers.local import LocalAccount
from eth_hash.auto import keccak
from eth_utils import to_checksum_address

from ..spec.models import ParamType, Schema, resolve_param_type
from ..utils import strip_0x
from .client import Balance, ChainClient, ChainError
from .nonce import NonceCounter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_GAS_LIMIT = 500_000
WEI_PER_ETH = Decimal(10**18)

ABI_TYPES: dict[ParamType, str] = {
    ParamType.ADDRESS: "address",
    ParamType.INTEGER: "uint256",
    ParamType.STRING: "string",
    ParamType.BOOLEAN: "bool",
}


def abi_type(tag: str) -> str:
    """Map a schema type tag to a Solidity ABI type; unknown tags pass through."""
    param_type = resolve_param_type(tag)
    return tag if param_type is None else ABI_TYPES[param_type]


def function_selector(name: str, input_types: Sequence[str]) -> bytes:
    # Keccak-256, not NIST SHA3-256.
    return keccak(f"{name}({','.join(input_types)})".encode("utf-8"))[:4]


def encode_call(name: str, input_types: Sequence[str], args: Sequence[Any]) -> str:
    """ABI-encode a function call to 0x-prefixed calldata."""
    encoded_args = encode(list(input_types), list(args)) if input_types else b""
    return "0x" + function_selector(name, input_types).hex() + encoded_args.hex()


def decode_result(output_types: Sequence[str], data: str) -> Any:
    """Decode return data: single value, tuple for several, raw hex if untyped."""
    if not output_types:
        return data
    raw = bytes.fromhex(strip_0x(data))
    decoded = decode(list(output_types), raw)
    if len(decoded) == 1:
        return decoded[0]
    return decoded


class EvmClient(ChainClient):
    def __init__(
        self,
        rpc_url: str,
        contract: str,
        account: LocalAccount,
        schema: Schema,
        chain_id: Optional[int] = None,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        timeout: float = DEFAULT_TIMEOUT,
        receipt_timeout: float = 120.0,
        poll_interval: float = 2.0,
        http_client: Optional[httpx.Client] = None,
        nonce_counter: Optional[NonceCounter] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(contract=to_checksum_address(contract), address=account.address)
        self.rpc_url = rpc_url
        self.account = account
        self.schema = schema
        self.gas_limit = gas_limit
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self._chain_id = chain_id
        self._http = http_client or httpx.Client(timeout=timeout)
        self._owns_http = http_client is None
        self.nonces = nonce_counter or NonceCounter(self.get_pending_nonce)
        self._clock = clock
        self._sleep = sleep
        self._request_id = 0

    def _rpc_call(self, method: str, params: list) -> Any:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": self._request_id}
        try:
            response = self._http.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise ChainError(f"{method} failed: {exc}", kind=ChainError.TRANSPORT) from exc
        except ValueError as exc:
            raise ChainError(f"{method}: response is not JSON", kind=ChainError.TRANSPORT) from exc

        if "error" in data:
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            kind = ChainError.REVERTED if "revert" in str(message).lower() else ChainError.REJECTED
            raise ChainError(f"RPC error: {message}", kind=kind)
        return data.get("result")

    # ------------------------------------------------------------ accounts

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(self._rpc_call("eth_chainId", []), 16)
        return self._chain_id

    def get_balance(self, address: Optional[str] = None) -> Balance:
        address = address or self.address
        wei = int(self._rpc_call("eth_getBalance", [address, "latest"]), 16)
        nonce = int(self._rpc_call("eth_getTransactionCount", [address, "latest"]), 16)
        return Balance(amount=Decimal(wei) / WEI_PER_ETH, nonce=nonce, unit="ETH")

    def get_pending_nonce(self) -> int:
        return int(self._rpc_call("eth_getTransactionCount", [self.address, "pending"]), 16)

    def get_gas_price(self) -> int:
        return int(self._rpc_call("eth_gasPrice", []), 16)

    # ------------------------------------------------------------ calldata

    def _calldata(self, method_name: str, args: Mapping[str, Any]) -> str:
        method = self.schema.get(method_name)
        input_types = [abi_type(p.type_tag) for p in method.params]
        values = [args[p.name] for p in method.params]
        return encode_call(method_name, input_types, values)

    def query(self, method_name: str, args: Mapping[str, Any]) -> Any:
        calldata = self._calldata(method_name, args)
        result = self._rpc_call("eth_call", [{"to": self.contract, "data": calldata}, "latest"])
        if result is None or result == "0x":
            return None
        output_types = [abi_type(t) for t in self.schema.get(method_name).returns]
        return decode_result(output_types, result)

    # -------------------------------------------------------- transactions

    def submit_transaction(self, method_name: str, args: Mapping[str, Any]) -> str:
        calldata = self._calldata(method_name, args)
        nonce = self.nonces.reserve()
        try:
            tx = {
                "to": self.contract,
                "data": calldata,
                "value": 0,
                "nonce": nonce,
                "gas": self.gas_limit,
                "gasPrice": self.get_gas_price(),
                "chainId": self.chain_id,
            }
            signed = self.account.sign_transaction(tx)
            raw_tx = "0x" + bytes(signed.raw_transaction).hex()
            tx_hash = self._rpc_call("eth_sendRawTransaction", [raw_tx])
        except Exception:
            self.nonces.release(nonce)
            raise
        if not tx_hash:
            self.nonces.release(nonce)
            raise ChainError("eth_sendRawTransaction returned no hash", kind=ChainError.REJECTED)

        logger.info("%s submitted: %s (nonce %d)", method_name, tx_hash, nonce)
        receipt = self.wait_for_receipt(tx_hash)
        if int(receipt.get("status", "0x0"), 16) != 1:
            raise ChainError(f"transaction {tx_hash} reverted", kind=ChainError.REVERTED, tx_id=tx_hash)
        return tx_hash

    def wait_for_receipt(self, tx_hash: str) -> dict:
        """
        Wait for a transaction receipt.

        Raises:
            ChainError: kind ``timeout`` if no receipt within receipt_timeout
        """
        start = self._clock()
        while self._clock() - start < self.receipt_timeout:
            receipt = self._rpc_call("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                return receipt
            self._sleep(self.poll_interval)
        raise ChainError(
            f"Transaction {tx_hash} not confirmed within {self.receipt_timeout}s",
            kind=ChainError.TIMEOUT,
            tx_id=tx_hash,
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
