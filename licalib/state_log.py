"""Per-iteration logging of optimisation parameter blocks."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

import numpy as np


class CheckStateCallback:
    """Record the values of watched parameter blocks once per call.

    Blocks are kept by reference when given as numpy arrays, so later
    in-place changes show up in subsequent lines.  With a filename, a
    header line is written on the first call and each call appends one
    line; without one, lines go to standard output with block names.
    """

    def __init__(self, filename: str | Path = "") -> None:
        self.filename = str(filename)
        self.iteration = 0
        self._descriptions: list[str] = []
        self._blocks: list[np.ndarray] = []

    def add_check_state(self, description: str, block: Sequence[float] | np.ndarray) -> None:
        """Watch ``block`` under the name ``description``."""
        if not isinstance(block, np.ndarray):
            block = np.asarray(block, dtype=float)
        self._descriptions.append(description)
        self._blocks.append(block)

    def __call__(self) -> str:
        """Log the current values and return the line that was written."""
        if self.iteration == 0 and self.filename:
            header = " ".join(["Iteration", *self._descriptions]) + "\n"
            Path(self.filename).write_text(header, encoding="utf-8")

        parts = [str(self.iteration)]
        for description, block in zip(self._descriptions, self._blocks):
            if not self.filename:
                parts.append(description)
            parts.extend(f"{float(v):g}" for v in block.ravel())
        line = " ".join(parts) + "\n"

        if self.filename:
            with open(self.filename, "a", encoding="utf-8") as handle:
                handle.write(line)
        else:
            sys.stdout.write(line)

        self.iteration += 1
        return line