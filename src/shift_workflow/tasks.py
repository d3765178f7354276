"""
Deferred tasks bound to a form session.

The host is anything exposing Tk's ``after(ms, func)`` / ``after_cancel(id)``
pair, normally the form's own toplevel window.
"""

import logging
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class SessionTasks:
    """Group of pending callbacks that can be cancelled together"""

    def __init__(self, host):
        self.host = host
        self.closed = False
        self._pending: Dict[object, str] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(self, delay_ms: int, callback: Callable[[], None], name: str = "task"):
        """Run callback after delay_ms unless the group is cancelled first"""
        if self.closed:
            logger.debug(f"Ignoring '{name}' scheduled on a closed task group")
            return None

        token = object()

        def run():
            self._pending.pop(token, None)
            if self.closed:
                return
            callback()

        after_id = self.host.after(delay_ms, run)
        self._pending[token] = after_id
        return after_id

    def cancel_all(self):
        self.closed = True
        for after_id in list(self._pending.values()):
            try:
                self.host.after_cancel(after_id)
            except Exception as e:
                # The host window may already be destroyed
                logger.debug(f"after_cancel({after_id}) failed: {e}")
        if self._pending:
            logger.info(f"Cancelled {len(self._pending)} pending form task(s)")
        self._pending.clear()
