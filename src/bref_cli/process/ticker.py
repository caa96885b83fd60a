"""Cooperative progress indicator."""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

DEFAULT_FRAMES = ("|", "/", "-", "\\")


class ProgressTicker:
    """
    Draws one frame of a rotating indicator per ``tick`` call.

    The ticker never sleeps or schedules anything: whoever polls decides
    how often it advances.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        frames: Sequence[str] = DEFAULT_FRAMES,
        enabled: Optional[bool] = None,
    ) -> None:
        self.stream = stream or sys.stderr
        self.frames = tuple(frames)
        if enabled is None:
            enabled = bool(getattr(self.stream, "isatty", lambda: False)())
        self.enabled = enabled
        self._index = 0
        self._width = 0

    def tick(self, label: str) -> None:
        if not self.enabled:
            return
        frame = self.frames[self._index % len(self.frames)]
        self._index += 1
        line = f"{frame} {label}"
        # Pad over a longer previous label so no tail is left behind.
        padding = " " * max(self._width - len(line), 0)
        self.stream.write(f"\r{line}{padding}")
        self.stream.flush()
        self._width = len(line)

    def clear(self) -> None:
        if not self.enabled or not self._width:
            return
        self.stream.write("\r" + " " * self._width + "\r")
        self.stream.flush()
        self._width = 0
