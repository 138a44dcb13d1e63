"""
Type aliases for topazsim.

Per-product and per-region quantities are stored as small NumPy vectors
indexed in ``PRODUCTS`` / ``REGIONS`` order (see `topazsim.ledger`).

Examples
--------
>>> import numpy as np
>>> from topazsim.typing import Float1D, Int1D
>>> inventory: Int1D = np.array([500, 200, 0], dtype=np.int64)
>>> prices: Float1D = np.array([100.0, 120.0, 150.0])
"""

from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

# === Internal Type Aliases (precise numpy types) ===

Float1D: TypeAlias = NDArray[np.float64]
Int1D: TypeAlias = NDArray[np.int64]
Bool1D: TypeAlias = NDArray[np.bool_]

Float2D: TypeAlias = NDArray[np.float64]
Int2D: TypeAlias = NDArray[np.int64]

__all__ = [
    "Float1D",
    "Int1D",
    "Bool1D",
    "Float2D",
    "Int2D",
]
