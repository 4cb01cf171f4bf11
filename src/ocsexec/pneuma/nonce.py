from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class NonceCounter:
    """
    Hands out transaction sequence numbers for one account.

    ``fetch`` returns the next nonce the chain will accept. The counter never
    hands out a value at or below one it already reserved, so consecutive
    writes stay ordered while earlier transactions are still pending.
    """

    def __init__(self, fetch: Callable[[], int]) -> None:
        self._fetch = fetch
        self._last: Optional[int] = None

    @property
    def last(self) -> Optional[int]:
        return self._last

    def reserve(self) -> int:
        on_chain = self._fetch()
        nonce = on_chain if self._last is None else max(on_chain, self._last + 1)
        logger.debug("nonce reserved: %d (chain says %d)", nonce, on_chain)
        self._last = nonce
        return nonce

    def release(self, nonce: int) -> None:
        """Give back a reservation whose transaction never reached the node."""
        if self._last == nonce:
            self._last = nonce - 1 if nonce > 0 else None
            logger.debug("nonce released: %d", nonce)
