"""
Audible feedback cues.

Playback is best effort: a failing backend is logged and never interrupts
the caller.
"""

import logging
from collections import deque
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SOUND_CUES = ("success", "error", "click", "notification", "complete", "toggle", "delete")
DEFAULT_VOLUME = 0.5


class SoundEffects:
    """Fire-and-forget cue player"""

    def __init__(self, backend: Optional[Callable[[str, float], None]] = None, enabled: bool = True):
        self.backend = backend
        self.enabled = enabled
        self.played = deque(maxlen=100)  # (cue, volume), newest last

    def play(self, cue: str, volume: Optional[float] = None):
        if not self.enabled:
            return
        if cue not in SOUND_CUES:
            logger.warning(f"Unknown sound cue '{cue}'")
            return

        volume = DEFAULT_VOLUME if volume is None else volume
        self.played.append((cue, volume))

        if self.backend is None:
            return
        try:
            self.backend(cue, volume)
        except Exception as e:
            logger.error(f"Failed to play sound '{cue}': {e}")

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled
