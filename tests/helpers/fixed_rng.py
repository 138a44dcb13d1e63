from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray


# Deterministic stub RNG for unit-tests
class FixedRNG:
    """
    Tiny deterministic stand-in for `numpy.random.Generator`.

    Only the subset of the NumPy API required by the market events is
    implemented:

    * `random`

    The sequence of draws is taken from the *fixed* values supplied at
    construction, so results are completely reproducible.
    """

    _buffer: NDArray[np.float64]
    _cursor: int

    def __init__(self, data: Sequence[float]) -> None:
        self._buffer = np.asarray(data, dtype=np.float64).ravel().copy()
        self._cursor = 0

    @property
    def consumed(self) -> int:
        """Number of draws taken so far."""
        return self._cursor

    def random(self) -> float:
        """Deterministic stand-in for `Generator.random` (scalar form only)."""
        if self._cursor >= self._buffer.size:
            raise RuntimeError("FixedRNG exhausted – enlarge the seed vector")
        out = float(self._buffer[self._cursor])
        self._cursor += 1
        return out
