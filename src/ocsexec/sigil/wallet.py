"""
Wallet provider.

A wallet is loaded once before a run from ``wallet.json``::

    {"priv": "<base64 or hex key>", "addr": "oct...", "rpc": "https://..."}

or, when that file does not exist, from ``OCSEXEC_PRIVATE_KEY``,
``OCSEXEC_ADDRESS`` and ``OCSEXEC_RPC_URL`` (``.env`` is loaded first).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..errors import WalletError
from .keys import load_eth_account

DEFAULT_ENV_PATH = Path(".env")

_KEY_FIELDS = ("priv", "private_key")
_ADDR_FIELDS = ("addr", "address")
_RPC_FIELDS = ("rpc", "rpc_url")


@dataclass(frozen=True)
class Wallet:
    address: str
    private_key_material: str = field(repr=False)
    rpc_endpoint: str

    @property
    def rpc_url(self) -> str:
        return self.rpc_endpoint.rstrip("/")


def load_wallet(
    path: Optional[Path] = None,
    env_path: Optional[Path] = None,
    chain: str = "octra",
) -> Wallet:
    """
    Load the wallet from a JSON file or the environment.

    Args:
        path: Wallet JSON file (default: ./wallet.json)
        env_path: .env file consulted when the JSON file is absent
        chain: ``evm`` allows the address to be derived from the key

    Raises:
        FileNotFoundError: If neither a wallet file nor environment key exists
        WalletError: If the wallet is incomplete or unreadable
    """
    path = path or Path("wallet.json")
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise WalletError(f"Cannot read wallet file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise WalletError(f"Wallet file {path} must contain a JSON object.")
        priv = _first(data, _KEY_FIELDS)
        addr = _first(data, _ADDR_FIELDS)
        rpc = _first(data, _RPC_FIELDS)
        origin = str(path)
    else:
        env_path = env_path or DEFAULT_ENV_PATH
        if env_path.exists():
            load_dotenv(env_path, override=False)
        priv = os.environ.get("OCSEXEC_PRIVATE_KEY")
        if not priv:
            raise FileNotFoundError(
                f"Wallet file {path} not found and OCSEXEC_PRIVATE_KEY is not set."
            )
        addr = os.environ.get("OCSEXEC_ADDRESS")
        rpc = os.environ.get("OCSEXEC_RPC_URL")
        origin = "environment"

    if not priv:
        raise WalletError(f"Private key missing in {origin}.")
    if not addr and chain == "evm":
        addr = load_eth_account(priv).address
    if not addr:
        raise WalletError(f"Address missing in {origin}.")
    if not rpc:
        raise WalletError(f"RPC endpoint missing in {origin}.")

    return Wallet(address=addr, private_key_material=priv, rpc_endpoint=rpc)


def _first(data: dict, keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if value:
            return str(value)
    return None
