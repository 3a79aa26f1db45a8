"""Supersede stale async results with per-key monotonic tokens.

Several lookups may be in flight for the same key (a user switching currency
twice before the first rate arrives). Each issue() hands out a new token for
the key; a result is only applied while its token is still the latest one.
In-flight work is never cancelled, older results are just dropped.
"""

from __future__ import annotations

import itertools
import logging
from typing import Awaitable, Callable, Dict, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestOnly:
    """Track the most recently issued token per key."""

    def __init__(self, name: str = "latest_only"):
        self.name = name
        self._counter = itertools.count(1)
        self._tokens: Dict[Hashable, int] = {}

    def issue(self, key: Hashable) -> int:
        """Issue a new token for key, superseding every earlier one."""
        token = next(self._counter)
        self._tokens[key] = token
        return token

    def is_current(self, key: Hashable, token: int) -> bool:
        return self._tokens.get(key) == token

    def discard(self, key: Hashable) -> None:
        """Forget key; any token still in flight for it becomes stale."""
        self._tokens.pop(key, None)

    async def run(
        self,
        key: Hashable,
        operation: Callable[[], Awaitable[T]],
    ) -> Tuple[bool, Optional[T]]:
        """Await operation under a fresh token.

        Returns:
            (applied, result): applied is False when a newer token was issued
            for key (or key was discarded) while operation was running, in
            which case result is None.
        """
        token = self.issue(key)
        result = await operation()
        if not self.is_current(key, token):
            logger.debug(f"{self.name}: dropping stale result for {key!r} (token {token})")
            return False, None
        return True, result
