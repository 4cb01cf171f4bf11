"""
Pneuma - On-chain interaction layer.

One abstract ChainClient with two implementations:
- octra: Octra node REST API, Ed25519-signed contract calls
- evm:   Ethereum JSON-RPC, eth-account signed raw transactions

Uses httpx for HTTP; no web3.py.
"""
