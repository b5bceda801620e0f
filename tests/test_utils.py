import numpy as np
import pytest

from kmeans_engine.utils import (
    default_accumulator,
    dtype_limits,
    euclidean_distances,
    mean_in_accumulator,
    resolve_dtype,
    saturate_cast,
)


@pytest.mark.parametrize("storage, expected", [
    (np.int8, np.int64),
    (np.int32, np.int64),
    (np.uint8, np.uint64),
    (np.float32, np.float64),
    ("float64", np.float64),
])
def test_default_accumulator(storage, expected):
    assert default_accumulator(storage) == np.dtype(expected)


@pytest.mark.parametrize("dtype", [bool, np.complex128, object])
def test_resolve_dtype_rejects_non_real(dtype):
    with pytest.raises(ValueError):
        resolve_dtype(dtype)


def test_dtype_limits():
    assert dtype_limits(np.int8) == (-128, 127)
    lo, hi = dtype_limits(np.float32)
    assert lo == -hi == np.finfo(np.float32).min


def test_saturate_cast_integer_clamps():
    out = saturate_cast(np.array([300, -300, 5], dtype=np.int64), np.int8)
    assert out.dtype == np.int8
    np.testing.assert_array_equal(out, [127, -128, 5])


def test_saturate_cast_signed_to_unsigned():
    out = saturate_cast(np.array([-5, 300, 17], dtype=np.int64), np.uint8)
    np.testing.assert_array_equal(out, [0, 255, 17])


def test_saturate_cast_unsigned_to_signed():
    out = saturate_cast(np.array([2**64 - 1, 3], dtype=np.uint64), np.int64)
    np.testing.assert_array_equal(out, [2**63 - 1, 3])


def test_saturate_cast_float_to_float32():
    info = np.finfo(np.float32)
    out = saturate_cast(np.array([1e40, -1e40, 1.5]), np.float32)
    assert out.dtype == np.float32
    np.testing.assert_array_equal(out, [info.max, info.min, 1.5])


def test_saturate_cast_float_to_int_truncates():
    out = saturate_cast(np.array([2.9, -2.9, 1e6]), np.int16)
    np.testing.assert_array_equal(out, [2, -2, 32767])


def test_saturate_cast_keeps_shape():
    values = np.arange(6, dtype=np.int64).reshape(2, 3) * 100
    out = saturate_cast(values, np.int8)
    assert out.shape == (2, 3)
    np.testing.assert_array_equal(out, [[0, 100, 127], [127, 127, 127]])


def test_mean_in_accumulator_integer_truncates_toward_zero():
    sums = np.array([[-7, 7], [9, -1]], dtype=np.int64)
    counts = np.array([2, 4])
    out = mean_in_accumulator(sums, counts, np.int64)
    assert out.dtype == np.int64
    np.testing.assert_array_equal(out, [[-3, 3], [2, 0]])


def test_mean_in_accumulator_float():
    sums = np.array([[3.0, 1.0]], dtype=np.float32)
    out = mean_in_accumulator(sums, np.array([2]), np.float32)
    assert out.dtype == np.float32
    np.testing.assert_allclose(out, [[1.5, 0.5]])


def test_euclidean_distances_in_double():
    X = np.array([[0, 0], [3, 4]], dtype=np.int8)
    C = np.array([[0, 0], [-128, -128]], dtype=np.int8)
    d = euclidean_distances(X, C)
    assert d.dtype == np.float64
    np.testing.assert_allclose(d[1, 0], 5.0)
    np.testing.assert_allclose(d[0, 1], np.hypot(128, 128))
