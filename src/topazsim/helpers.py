# src/topazsim/helpers.py
import hashlib
import json
from typing import Any

import numpy as np
from numpy.random import Generator, default_rng

from topazsim.typing import Float1D, Int1D


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def safe_divide(num: float, den: float, default: float = 0.0) -> float:
    """Return ``num / den``, or *default* when *den* is zero."""
    if den == 0:
        return default
    return num / den


def stable_int_seed(*parts: Any, salt: str = "topazsim") -> int:
    """
    Return a stable 32-bit integer seed derived from arbitrary inputs.

    Uses SHA-256 over a canonical JSON representation of *parts*, so the
    result does not depend on Python's randomized ``hash()`` and is the same
    across processes and platforms.
    """
    payload = json.dumps(
        parts, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str
    )
    h = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(h[:4], "big", signed=False)


def session_rng(base_seed: int | None, game_id: str) -> Generator:
    """
    Create the random source of one session.

    With *base_seed* set, the stream is fully determined by
    ``(base_seed, game_id)``; with ``None`` it is seeded from OS entropy.
    """
    if base_seed is None:
        return default_rng()
    return default_rng(stable_int_seed(base_seed, game_id))


def proportional_split(total: int, weights: Float1D) -> Int1D:
    """
    Split *total* integer units across buckets proportionally to *weights*.

    Each bucket receives ``floor(total * w / sum(w))``; the rounding remainder
    goes to the bucket with the largest weight (first one on ties), so the
    result always sums to *total*.
    """
    weights = np.asarray(weights, dtype=np.float64)
    w_sum = weights.sum()
    if total <= 0 or w_sum <= 0:
        return np.zeros(weights.size, dtype=np.int64)
    shares = np.floor(total * weights / w_sum).astype(np.int64)
    shares[int(np.argmax(weights))] += total - int(shares.sum())
    return shares


def freeze(arr: np.ndarray) -> np.ndarray:
    """Return a read-only copy of *arr*."""
    out = np.array(arr, copy=True)
    out.setflags(write=False)
    return out
