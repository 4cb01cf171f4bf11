"""
Theurgy - Command implementations.

- run:     Invoke every declared contract method and write the report
- balance: Show wallet balance and nonce
"""
