"""
Database health tracking shared by the content stores
"""
import time
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


class HealthState:
    """
    Cooperative "is the database usable" signal.

    Marked healthy after a successful initialization and unhealthy on any
    store failure. Readers consult it to skip the database and to decide
    when an opportunistic reconnect is due.
    """

    def __init__(self, healthy: bool = False, clock: Callable[[], float] = time.monotonic):
        self._healthy = healthy
        self._clock = clock
        self.last_attempt: Optional[float] = None
        self.in_progress = False

    def is_healthy(self) -> bool:
        return self._healthy

    def mark_healthy(self):
        if not self._healthy:
            logger.info("Database marked healthy")
        self._healthy = True

    def mark_unhealthy(self):
        if self._healthy:
            logger.warning("Database marked unhealthy - falling back to file storage")
        self._healthy = False

    def start_attempt(self):
        self.in_progress = True
        self.last_attempt = self._clock()

    def finish_attempt(self):
        self.in_progress = False

    def should_reconnect(self, cooldown: float) -> bool:
        """True when unhealthy, idle and the cooldown since the last attempt has elapsed"""
        if self._healthy or self.in_progress:
            return False
        if self.last_attempt is None:
            return True
        return self._clock() - self.last_attempt > cooldown

    def claim_reconnect(self, cooldown: float) -> bool:
        """should_reconnect() that also starts the cooldown window, so only one caller wins"""
        if not self.should_reconnect(cooldown):
            return False
        self.last_attempt = self._clock()
        return True
