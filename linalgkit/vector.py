"""Dense vector type with arithmetic, norms and reductions."""

from __future__ import annotations

import math
import sys
from numbers import Number
from typing import Any, Callable, Iterable, Iterator

from .errors import DimensionError, InvalidParameterError

_EPSILON = sys.float_info.epsilon


class Vector:
    """A dense vector of scalars stored contiguously."""

    __slots__ = ("_data",)

    def __init__(self, data: Iterable[Any] = ()) -> None:
        self._data = list(data)

    # Constructors -------------------------------------------------------

    @classmethod
    def zeros(cls, dim: int) -> Vector:
        """All-zero vector of the given dimension."""
        return cls([0.0] * dim)

    @classmethod
    def ones(cls, dim: int) -> Vector:
        """All-ones vector of the given dimension."""
        return cls([1.0] * dim)

    @classmethod
    def unit(cls, dim: int, index: int) -> Vector:
        """Unit basis vector ``e_index``."""
        if not 0 <= index < dim:
            raise IndexError("Index out of bounds for unit vector")
        out = cls.zeros(dim)
        out._data[index] = 1.0
        return out

    @classmethod
    def filled(cls, dim: int, value: Any) -> Vector:
        """Vector with every element equal to ``value``."""
        return cls([value] * dim)

    @classmethod
    def from_fn(cls, dim: int, f: Callable[[int], Any]) -> Vector:
        """Vector whose element ``i`` is ``f(i)``."""
        return cls(f(i) for i in range(dim))

    # Basic access -------------------------------------------------------

    def dim(self) -> int:
        """Number of elements."""
        return len(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def tolist(self) -> list:
        """A copy of the elements as a list."""
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Vector(self._data[index])
        return self._data[index]

    def __setitem__(self, index, value) -> None:
        self._data[index] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Vector({self._data!r})"

    def __str__(self) -> str:
        return "[" + ", ".join(f"{value:.4f}" for value in self._data) + "]"

    # Arithmetic ---------------------------------------------------------

    def _check_same_dim(self, other: Vector) -> None:
        if len(self._data) != len(other._data):
            raise DimensionError(
                f"Dimensions mismatch: {len(self._data)} vs {len(other._data)}"
            )

    def __add__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        self._check_same_dim(other)
        return Vector(x + y for x, y in zip(self._data, other._data))

    def __sub__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        self._check_same_dim(other)
        return Vector(x - y for x, y in zip(self._data, other._data))

    def __neg__(self) -> Vector:
        return Vector(-x for x in self._data)

    def __mul__(self, scalar: Any) -> Vector:
        if not isinstance(scalar, Number):
            return NotImplemented
        return Vector(scalar * x for x in self._data)

    def __rmul__(self, scalar: Any) -> Vector:
        return self.__mul__(scalar)

    def __iadd__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        self._check_same_dim(other)
        for i, value in enumerate(other._data):
            self._data[i] += value
        return self

    def __isub__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        self._check_same_dim(other)
        for i, value in enumerate(other._data):
            self._data[i] -= value
        return self

    def __imul__(self, scalar: Any) -> Vector:
        if not isinstance(scalar, Number):
            return NotImplemented
        self._data = [x * scalar for x in self._data]
        return self

    # Reductions and maps ------------------------------------------------

    def dot(self, other: Vector) -> Any:
        """Inner product with ``other``."""
        self._check_same_dim(other)
        total = 0.0
        for x, y in zip(self._data, other._data):
            total += x * y
        return total

    def sum(self) -> Any:
        total = 0.0
        for value in self._data:
            total += value
        return total

    def map(self, f: Callable[[Any], Any]) -> Vector:
        return Vector(f(x) for x in self._data)

    def map_inplace(self, f: Callable[[Any], Any]) -> None:
        self._data = [f(x) for x in self._data]

    def zip_map(self, other: Vector, f: Callable[[Any, Any], Any]) -> Vector:
        self._check_same_dim(other)
        return Vector(f(x, y) for x, y in zip(self._data, other._data))

    def approx_eq(self, other: Vector, tol: float) -> bool:
        """True when dimensions match and every element differs by at most ``tol``."""
        return len(self._data) == len(other._data) and all(
            abs(x - y) <= tol for x, y in zip(self._data, other._data)
        )

    def norm_l2(self) -> float:
        return math.sqrt(self.dot(self))

    def norm_l1(self) -> float:
        return sum(abs(x) for x in self._data)

    def norm_inf(self) -> float:
        return max((abs(x) for x in self._data), default=0.0)

    def normalize(self) -> Vector:
        """Copy scaled to unit Euclidean length."""
        norm = self.norm_l2()
        if not norm > _EPSILON:
            raise InvalidParameterError("Cannot normalize zero vector")
        return self * (1.0 / norm)

    def normalize_inplace(self) -> None:
        norm = self.norm_l2()
        if not norm > _EPSILON:
            raise InvalidParameterError("Cannot normalize zero vector")
        inv = 1.0 / norm
        self._data = [x * inv for x in self._data]

    def min(self) -> float:
        return min(self._data, default=math.inf)

    def max(self) -> float:
        return max(self._data, default=-math.inf)

    def mean(self) -> float:
        if not self._data:
            return math.nan
        return self.sum() / len(self._data)

    def argmin(self) -> int:
        """Index of the first smallest element."""
        if not self._data:
            raise ValueError("argmin of an empty vector")
        return min(range(len(self._data)), key=self._data.__getitem__)

    def argmax(self) -> int:
        """Index of the last largest element."""
        if not self._data:
            raise ValueError("argmax of an empty vector")
        return max(reversed(range(len(self._data))), key=self._data.__getitem__)

    def distance(self, other: Vector) -> float:
        """Euclidean distance to ``other``."""
        self._check_same_dim(other)
        return math.sqrt(sum((x - y) ** 2 for x, y in zip(self._data, other._data)))

    def cross(self, other: Vector) -> Vector:
        """3D cross product."""
        if len(self._data) != 3 or len(other._data) != 3:
            raise DimensionError("Cross product is defined only for 3D vectors")
        a0, a1, a2 = self._data
        b0, b1, b2 = other._data
        return Vector([a1 * b2 - a2 * b1, a2 * b0 - a0 * b2, a0 * b1 - a1 * b0])