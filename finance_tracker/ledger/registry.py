"""
User Registry

Counts accounts created during a session. The registry is an explicit
object owned by whoever composes the application, so separate sessions
(and tests) never share a counter.
"""

import threading

import structlog


logger = structlog.get_logger(__name__)


class UserRegistry:
    """
    Cumulative count of Account instances.

    Incremented once per account construction, including clones.
    Never decremented.
    """

    def __init__(self):
        self._total_created = 0
        self._names: list[str] = []
        self._lock = threading.Lock()

    def register(self, name: str) -> int:
        """Record a newly created account and return the new total."""
        with self._lock:
            self._total_created += 1
            self._names.append(name)
            total = self._total_created
        logger.debug("account_registered", name=name, total_users=total)
        return total

    def total_users(self) -> int:
        return self._total_created

    def names(self) -> tuple[str, ...]:
        """Names of registered accounts in creation order (may repeat)."""
        return tuple(self._names)
