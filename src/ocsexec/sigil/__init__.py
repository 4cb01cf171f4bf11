"""
Sigil - Wallet loading and signing keys (Ed25519 for Octra, secp256k1 for EVM).
"""
