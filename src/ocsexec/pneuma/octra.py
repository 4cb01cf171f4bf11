"""
Octra REST client.

Endpoints used:
- GET  /balance/{address}    -> {"balance_raw": "...", "nonce": n}
- POST /contract/call-view   -> {"status": "success", "result": ...}
- POST /call-contract        -> {"tx_hash": "..."}
- GET  /tx/{hash}            (optional confirmation poll)

Contract calls are authorized by an Ed25519 signature over the compact JSON
transaction header, in exactly this key order:
``from, to_, amount, nonce, ou, timestamp``.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional

import httpx
from cryptography.hazmat.primitives.asymmetric import ed25519

from ..sigil.keys import public_key_b64, sign_b64
from ..utils import compact_json
from .client import Balance, ChainClient, ChainError
from .nonce import NonceCounter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 100.0
MICRO_OCT = Decimal(1_000_000)
CALL_AMOUNT = "0"
CALL_OU = "1"


def encode_param(value: Any) -> str:
    """Octra contract params travel as strings."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class OctraClient(ChainClient):
    def __init__(
        self,
        rpc_url: str,
        contract: str,
        address: str,
        signing_key: ed25519.Ed25519PrivateKey,
        timeout: float = DEFAULT_TIMEOUT,
        confirm_timeout: float = 0.0,
        poll_interval: float = 2.0,
        http_client: Optional[httpx.Client] = None,
        nonce_counter: Optional[NonceCounter] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(contract=contract, address=address)
        self.rpc_url = rpc_url.rstrip("/")
        self.signing_key = signing_key
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self._http = http_client or httpx.Client(timeout=timeout)
        self._owns_http = http_client is None
        self.nonces = nonce_counter or NonceCounter(lambda: self.get_balance().nonce + 1)
        self._clock = clock
        self._sleep = sleep

    # ---------------------------------------------------------------- HTTP

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        url = f"{self.rpc_url}{path}"
        try:
            if method == "GET":
                response = self._http.get(url)
            else:
                response = self._http.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise ChainError(f"{method} {path} failed: {exc}", kind=ChainError.TRANSPORT) from exc

        if response.status_code >= 400:
            raise ChainError(
                f"api error ({response.status_code}): {response.text}",
                kind=ChainError.REJECTED,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ChainError(f"{method} {path}: response is not JSON", kind=ChainError.TRANSPORT) from exc

    # ------------------------------------------------------------- queries

    def get_balance(self, address: Optional[str] = None) -> Balance:
        address = address or self.address
        data = self._request("GET", f"/balance/{address}")
        try:
            amount = Decimal(str(data["balance_raw"])) / MICRO_OCT
            nonce = int(data["nonce"])
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise ChainError(f"Unexpected balance response: {data!r}", kind=ChainError.TRANSPORT) from exc
        return Balance(amount=amount, nonce=nonce, unit="OCT")

    def query(self, method_name: str, args: Mapping[str, Any]) -> Any:
        data = self._request(
            "POST",
            "/contract/call-view",
            {
                "contract": self.contract,
                "method": method_name,
                "params": [encode_param(v) for v in args.values()],
                "caller": self.address,
            },
        )
        if not isinstance(data, dict) or data.get("status") != "success":
            raise ChainError(f"view call rejected: {data!r}", kind=ChainError.REVERTED)
        return data.get("result")

    # -------------------------------------------------------- transactions

    def build_call(self, method_name: str, args: Mapping[str, Any], nonce: int) -> dict[str, Any]:
        """Build and sign the /call-contract body for one invocation."""
        timestamp = self._clock()
        header = {
            "from": self.address,
            "to_": self.contract,
            "amount": CALL_AMOUNT,
            "nonce": nonce,
            "ou": CALL_OU,
            "timestamp": timestamp,
        }
        signature = sign_b64(compact_json(header).encode("utf-8"), self.signing_key)
        return {
            "contract": self.contract,
            "method": method_name,
            "params": [encode_param(v) for v in args.values()],
            "caller": self.address,
            "nonce": nonce,
            "timestamp": timestamp,
            "signature": signature,
            "public_key": public_key_b64(self.signing_key),
        }

    def submit_transaction(self, method_name: str, args: Mapping[str, Any]) -> str:
        nonce = self.nonces.reserve()
        try:
            body = self.build_call(method_name, args, nonce)
            data = self._request("POST", "/call-contract", body)
        except Exception:
            self.nonces.release(nonce)
            raise

        tx_hash = data.get("tx_hash") if isinstance(data, dict) else None
        if not tx_hash:
            self.nonces.release(nonce)
            raise ChainError(f"call-contract returned no tx_hash: {data!r}", kind=ChainError.REJECTED)

        logger.info("%s submitted: %s (nonce %d)", method_name, tx_hash, nonce)
        if self.confirm_timeout > 0:
            self.wait_for_transaction(tx_hash)
        return str(tx_hash)

    def wait_for_transaction(self, tx_hash: str, timeout: Optional[float] = None) -> dict[str, Any]:
        """
        Poll /tx/{hash} until the node knows the transaction.

        Raises:
            ChainError: kind ``timeout`` if not seen within the bound,
                        kind ``reverted`` if the node reports it failed
        """
        timeout = self.confirm_timeout if timeout is None else timeout
        start = self._clock()
        while True:
            try:
                data = self._request("GET", f"/tx/{tx_hash}")
            except ChainError as exc:
                if exc.kind != ChainError.REJECTED:
                    raise
                data = None
            if isinstance(data, dict):
                status = str(data.get("status", "")).lower()
                if status in ("failed", "rejected", "dropped"):
                    raise ChainError(
                        f"transaction {tx_hash} {status}", kind=ChainError.REVERTED, tx_id=tx_hash
                    )
                if status != "pending":
                    return data
            if self._clock() - start >= timeout:
                raise ChainError(
                    f"transaction {tx_hash} not confirmed within {timeout}s",
                    kind=ChainError.TIMEOUT,
                    tx_id=tx_hash,
                )
            self._sleep(self.poll_interval)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
