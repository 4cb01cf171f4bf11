from __future__ import annotations

from typing import Optional

from ..config import RunConfig
from ..sigil.keys import load_ed25519_key, load_eth_account
from ..sigil.wallet import Wallet
from ..spec.models import Schema
from .client import ChainClient
from .evm import EvmClient
from .octra import OctraClient


def create_client(
    wallet: Wallet,
    contract: str,
    schema: Schema,
    config: Optional[RunConfig] = None,
) -> ChainClient:
    """
    Build the chain client selected by ``config.chain``.

    Raises:
        WalletError: If the wallet key does not suit the selected chain
    """
    config = config or RunConfig()

    if config.chain == "octra":
        return OctraClient(
            rpc_url=wallet.rpc_url,
            contract=contract,
            address=wallet.address,
            signing_key=load_ed25519_key(wallet.private_key_material),
            timeout=config.http_timeout,
            confirm_timeout=config.confirm_timeout,
            poll_interval=config.poll_interval,
        )

    if config.chain == "evm":
        return EvmClient(
            rpc_url=wallet.rpc_url,
            contract=contract,
            account=load_eth_account(wallet.private_key_material),
            schema=schema,
            timeout=config.http_timeout,
            receipt_timeout=config.confirm_timeout or 120.0,
            poll_interval=config.poll_interval,
        )

    raise ValueError(f"Unsupported chain: {config.chain!r}")
