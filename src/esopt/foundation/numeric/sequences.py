"""Arithmetic sequences used to fill vectors (see ``Vector.from_sequence``)."""

from __future__ import annotations

import math
from collections.abc import Iterator


class Sequence:
    """A finite arithmetic sequence ``start + step * i`` for ``i < size``."""

    def __init__(self, start: float, step: float, size: int) -> None:
        self.start = float(start)
        self.step = float(step)
        self.size = max(0, int(size))

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[float]:
        for i in range(self.size):
            yield self.start + self.step * i


class Range(Sequence):
    """Values from ``start`` (included) to ``stop`` (excluded) by ``step``.

    ``Range(stop)`` counts from 0, ``Range(start, stop)`` steps by +1 or -1
    depending on the direction.
    """

    def __init__(self, start: float, stop: float | None = None, step: float | None = None) -> None:
        if stop is None:
            start, stop = 0.0, start
        if step is None:
            step = 1.0 if start < stop else -1.0
        if step == 0.0:
            raise ValueError("Range step must be non-zero.")
        size = math.floor((stop - start) / step)
        super().__init__(start, step, size)
        self.stop = float(stop)


class LinSpace(Sequence):
    """``size`` evenly spaced values over ``[start, stop]``.

    With ``endpoint=False`` the interval is half-open, as in ``numpy.linspace``.
    """

    def __init__(self, start: float, stop: float, size: int, endpoint: bool = True) -> None:
        intervals = size - 1 if endpoint else size
        step = (stop - start) / intervals if intervals > 0 else 0.0
        super().__init__(start, step, size)
        self.stop = float(stop)


__all__ = ["Sequence", "Range", "LinSpace"]
