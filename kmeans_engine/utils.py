"""Numeric helpers for the k-means engine.

Centroids are stored in a storage dtype and summed in a wider accumulator
dtype; these helpers resolve the two dtypes and narrow accumulated values
back into storage range.
"""

from typing import Tuple, Union

import numpy as np

DTypeLike = Union[np.dtype, type, str]


def resolve_dtype(dtype: DTypeLike) -> np.dtype:
    """Return `dtype` as a numpy dtype, rejecting non-real numeric kinds."""
    dt = np.dtype(dtype)
    if dt.kind not in "iuf":
        raise ValueError(f"Only integer and floating dtypes are supported, got {dt}")
    return dt


def default_accumulator(dtype: DTypeLike) -> np.dtype:
    """Widest dtype of the same family as `dtype`."""
    dt = resolve_dtype(dtype)
    if dt.kind == "i":
        return np.dtype(np.int64)
    if dt.kind == "u":
        return np.dtype(np.uint64)
    return np.dtype(np.float64)


def dtype_limits(dtype: DTypeLike) -> Tuple:
    """Lowest and highest finite values representable in `dtype`."""
    dt = resolve_dtype(dtype)
    info = np.iinfo(dt) if dt.kind in "iu" else np.finfo(dt)
    return info.min, info.max


def _bound_in(bound, dtype: np.dtype):
    # None when the bound lies outside `dtype`, i.e. no value can cross it
    lo, hi = dtype_limits(dtype)
    if bound < lo or bound > hi:
        return None
    return bound


def saturate_cast(values, dtype: DTypeLike) -> np.ndarray:
    """
    Narrow `values` into `dtype`, clamping out-of-range entries.

    Entries at or below the lowest value of `dtype` become that value, entries
    at or above the highest become the highest; the rest are converted with a
    plain cast (floats to integers truncate toward zero).

    Args:
        values: Array-like in any real numeric dtype
        dtype: Target storage dtype

    Returns:
        Array of the same shape in `dtype`
    """
    target = resolve_dtype(dtype)
    arr = np.asarray(values)
    source = resolve_dtype(arr.dtype)
    lo, hi = dtype_limits(target)

    low = np.zeros(arr.shape, dtype=bool)
    high = np.zeros(arr.shape, dtype=bool)
    lo_src = _bound_in(lo, source)
    hi_src = _bound_in(hi, source)
    if lo_src is not None:
        low = arr <= lo_src
    if hi_src is not None:
        high = arr >= hi_src

    result = np.where(low | high, 0, arr).astype(target)
    result[low] = lo
    result[high] = hi
    return result


def mean_in_accumulator(sums: np.ndarray, counts: np.ndarray, accum_dtype: DTypeLike) -> np.ndarray:
    """
    Divide per-cluster sums by their counts without leaving the accumulator dtype.

    Integer accumulators divide with truncation toward zero.

    Args:
        sums: Accumulated sums of shape (n_clusters, n_features)
        counts: Positive point counts of shape (n_clusters,)
        accum_dtype: Accumulator dtype of `sums`

    Returns:
        Means of shape (n_clusters, n_features) in `accum_dtype`
    """
    acc = resolve_dtype(accum_dtype)
    divisor = counts.astype(acc)[:, np.newaxis]
    if acc.kind == "f":
        return (sums / divisor).astype(acc)
    quotient = np.abs(sums) // divisor
    return np.where(sums < 0, -quotient, quotient).astype(acc)


def euclidean_distances(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Distances from every row of X to every centroid, in float64."""
    # X shape: (n_samples, n_features), centroids: (n_clusters, n_features)
    diff = (
        X.astype(np.float64)[:, np.newaxis, :]
        - centroids.astype(np.float64)[np.newaxis, :, :]
    )
    return np.sqrt(np.einsum("nkd,nkd->nk", diff, diff))
