import math

import pytest

from linalgkit.errors import DimensionError, InvalidParameterError
from linalgkit.vector import Vector


def test_add():
    a = Vector([1.0, 2.0, 3.0])
    b = Vector([4.0, 5.0, 6.0])
    assert a + b == Vector([5.0, 7.0, 9.0])


def test_sub():
    a = Vector([4.0, 5.0, 6.0])
    b = Vector([1.0, 2.0, 3.0])
    assert a - b == Vector([3.0, 3.0, 3.0])


def test_neg():
    assert -Vector([1.0, -2.0, 3.0]) == Vector([-1.0, 2.0, -3.0])


def test_mul_scalar():
    assert Vector([1.0, 2.0, 3.0]) * 2.0 == Vector([2.0, 4.0, 6.0])


def test_scalar_mul():
    assert 2.0 * Vector([1.0, 2.0, 3.0]) == Vector([2.0, 4.0, 6.0])


def test_dot():
    assert Vector([1.0, 2.0, 3.0]).dot(Vector([4.0, 5.0, 6.0])) == 32.0


def test_zeros():
    assert Vector.zeros(3) == Vector([0.0, 0.0, 0.0])


def test_add_incompatible():
    with pytest.raises(DimensionError):
        Vector([1.0, 2.0]) + Vector([1.0, 2.0, 3.0])


def test_dot_incompatible():
    with pytest.raises(DimensionError):
        Vector([1.0]).dot(Vector([1.0, 2.0]))


def test_ones_and_filled():
    assert Vector.ones(2) == Vector([1.0, 1.0])
    assert Vector.filled(3, 7.5).tolist() == [7.5, 7.5, 7.5]


def test_unit():
    assert Vector.unit(3, 1) == Vector([0.0, 1.0, 0.0])
    with pytest.raises(IndexError):
        Vector.unit(3, 3)


def test_from_fn():
    assert Vector.from_fn(4, lambda i: i * i).tolist() == [0, 1, 4, 9]


def test_dim_and_empty():
    assert Vector([1.0, 2.0]).dim() == 2
    assert len(Vector([1.0, 2.0])) == 2
    assert Vector().is_empty() is True
    assert Vector([0.0]).is_empty() is False


def test_indexing():
    v = Vector([1.0, 2.0, 3.0])
    v[1] = 10.0
    assert v[1] == 10.0
    assert list(v) == [1.0, 10.0, 3.0]


def test_inplace_ops():
    v = Vector([1.0, 2.0])
    original = v
    v += Vector([1.0, 1.0])
    assert v == Vector([2.0, 3.0])
    v -= Vector([0.5, 0.5])
    assert v == Vector([1.5, 2.5])
    v *= 2.0
    assert v == Vector([3.0, 5.0])
    assert v is original


def test_iadd_incompatible():
    v = Vector([1.0])
    with pytest.raises(DimensionError):
        v += Vector([1.0, 2.0])


def test_sum_and_mean():
    v = Vector([1.0, 2.0, 3.0, 4.0])
    assert v.sum() == 10.0
    assert v.mean() == 2.5
    assert math.isnan(Vector().mean())


def test_map_and_zip_map():
    v = Vector([1.0, 2.0])
    assert v.map(lambda x: x * 3) == Vector([3.0, 6.0])
    assert v.zip_map(Vector([3.0, 4.0]), lambda a, b: a * b) == Vector([3.0, 8.0])
    v.map_inplace(lambda x: -x)
    assert v == Vector([-1.0, -2.0])


def test_approx_eq():
    a = Vector([1.0, 2.0])
    assert a.approx_eq(Vector([1.0 + 1e-9, 2.0]), 1e-8)
    assert not a.approx_eq(Vector([1.1, 2.0]), 1e-8)
    assert not a.approx_eq(Vector([1.0]), 1.0)


def test_norms():
    v = Vector([3.0, -4.0])
    assert v.norm_l2() == 5.0
    assert v.norm_l1() == 7.0
    assert v.norm_inf() == 4.0


def test_normalize():
    v = Vector([3.0, 4.0])
    n = v.normalize()
    assert n.approx_eq(Vector([0.6, 0.8]), 1e-15)
    v.normalize_inplace()
    assert math.isclose(v.norm_l2(), 1.0)


def test_normalize_zero_vector_raises():
    with pytest.raises(InvalidParameterError):
        Vector.zeros(3).normalize()
    with pytest.raises(InvalidParameterError):
        Vector.zeros(2).normalize_inplace()


def test_min_max_empty_defaults():
    assert Vector().min() == math.inf
    assert Vector().max() == -math.inf
    assert Vector([2.0, -1.0, 5.0]).min() == -1.0
    assert Vector([2.0, -1.0, 5.0]).max() == 5.0


def test_argmin_argmax_ties():
    v = Vector([1.0, 3.0, 0.0, 3.0, 0.0])
    assert v.argmin() == 2
    assert v.argmax() == 3


def test_argmin_empty_raises():
    with pytest.raises(ValueError):
        Vector().argmin()


def test_distance():
    assert Vector([0.0, 0.0]).distance(Vector([3.0, 4.0])) == 5.0


def test_cross():
    x = Vector([1.0, 0.0, 0.0])
    y = Vector([0.0, 1.0, 0.0])
    assert x.cross(y) == Vector([0.0, 0.0, 1.0])
    with pytest.raises(DimensionError):
        Vector([1.0, 2.0]).cross(Vector([1.0, 2.0]))


def test_str_and_repr():
    v = Vector([1.0, -2.5])
    assert str(v) == "[1.0000, -2.5000]"
    assert repr(v) == "Vector([1.0, -2.5])"


def test_equality_with_other_type():
    assert (Vector([1.0]) == [1.0]) is False