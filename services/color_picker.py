"""Accent colors assigned to new scientist records."""

from __future__ import annotations

import random
from typing import Optional, Sequence

PALETTE = (
    "#3498db",  # blue
    "#e74c3c",  # red
    "#2ecc71",  # green
    "#f1c40f",  # yellow
    "#9b59b6",  # purple
    "#1abc9c",  # teal
    "#e67e22",  # orange
    "#34495e",  # dark blue
)


class ColorPicker:
    """Pick palette colors from an injectable random source.

    Pass a seeded `random.Random` to get a reproducible sequence.
    """

    def __init__(self, rng: Optional[random.Random] = None, palette: Sequence[str] = PALETTE) -> None:
        self._rng = rng or random.Random()
        self.palette = tuple(palette)

    def pick(self) -> str:
        return self._rng.choice(self.palette)
