"""
Latest-value handoff between the hand tracker and the render tick.

The tracker thread posts every landmark frame it produces; the tick takes
whatever is newest. Older unread frames are overwritten, never queued.
"""

import threading
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Observation:
    """One tracker sample. ``landmarks`` is None when no hand was seen."""

    landmarks: Any
    sequence: int


class LandmarkMailbox:
    """Single-slot, overwrite-on-post mailbox."""

    def __init__(self):
        self._lock = threading.Lock()
        self._latest: Optional[Observation] = None
        self._sequence = 0
        self._taken = 0

    def post(self, landmarks) -> int:
        """Publish a frame (or None for "no hand"); returns its sequence number."""
        with self._lock:
            self._sequence += 1
            self._latest = Observation(landmarks=landmarks, sequence=self._sequence)
            return self._sequence

    def clear(self) -> int:
        """Publish "no hand", e.g. when the camera is switched off."""
        return self.post(None)

    def take(self) -> Optional[Observation]:
        """Newest unread observation, or None if nothing arrived since the last take."""
        with self._lock:
            latest = self._latest
            if latest is None or latest.sequence == self._taken:
                return None
            self._taken = latest.sequence
            return latest

    def peek(self) -> Optional[Observation]:
        with self._lock:
            return self._latest

    @property
    def pending(self) -> bool:
        """True when a posted frame has not been taken yet."""
        with self._lock:
            return self._latest is not None and self._latest.sequence != self._taken
