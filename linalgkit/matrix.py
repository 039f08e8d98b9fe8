"""Dense row-major matrix with arithmetic, reductions and triangular solves."""

from __future__ import annotations

import math
import sys
from numbers import Number
from typing import Any, Callable, Iterable, Sequence

from .errors import DimensionError, InvalidParameterError, SingularMatrixError
from .vector import Vector

_EPSILON = sys.float_info.epsilon


class Matrix:
    """A dense matrix stored in row-major order."""

    __slots__ = ("_rows", "_cols", "_data")

    def __init__(self, rows: int, cols: int, data: Iterable[Any]) -> None:
        values = list(data)
        if rows < 0 or cols < 0:
            raise DimensionError("Matrix dimensions must be non-negative")
        if len(values) != rows * cols:
            raise DimensionError(
                f"Dimensions mismatch: {len(values)} values for a {rows}x{cols} matrix"
            )
        self._rows = rows
        self._cols = cols
        self._data = values

    # Constructors -------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]]) -> Matrix:
        """Build a matrix from a sequence of equally long rows."""
        row_list = [list(row) for row in rows]
        if not row_list:
            return cls(0, 0, [])
        width = len(row_list[0])
        if any(len(row) != width for row in row_list):
            raise DimensionError("All rows must have the same length")
        return cls(len(row_list), width, (value for row in row_list for value in row))

    @classmethod
    def from_fn(cls, rows: int, cols: int, f: Callable[[int, int], Any]) -> Matrix:
        """Matrix whose element ``(i, j)`` is ``f(i, j)``."""
        return cls(rows, cols, (f(i, j) for i in range(rows) for j in range(cols)))

    @classmethod
    def filled(cls, rows: int, cols: int, value: Any) -> Matrix:
        """Matrix with every element equal to ``value``."""
        return cls(rows, cols, [value] * (rows * cols))

    @classmethod
    def from_diagonal(cls, diag: Iterable[Any]) -> Matrix:
        """Square matrix with ``diag`` on the main diagonal."""
        values = list(diag)
        out = cls.zeros(len(values), len(values))
        for i, value in enumerate(values):
            out._data[i * out._cols + i] = value
        return out

    @classmethod
    def zeros(cls, rows: int, cols: int) -> Matrix:
        return cls(rows, cols, [0.0] * (rows * cols))

    @classmethod
    def identity(cls, n: int) -> Matrix:
        out = cls.zeros(n, n)
        for i in range(n):
            out._data[i * n + i] = 1.0
        return out

    # Basic access -------------------------------------------------------

    def rows(self) -> int:
        return self._rows

    def cols(self) -> int:
        return self._cols

    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    def size(self) -> int:
        return self._rows * self._cols

    def is_square(self) -> bool:
        return self._rows == self._cols

    def is_empty(self) -> bool:
        return not self._data

    def tolist(self) -> list[list[Any]]:
        """Rows as a list of lists."""
        return [self.row(i) for i in range(self._rows)]

    def _offset(self, key: Any) -> int:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("Matrix indices must be (row, col) tuples")
        i, j = key
        if not (0 <= i < self._rows and 0 <= j < self._cols):
            raise IndexError(f"Index ({i}, {j}) out of bounds for {self._rows}x{self._cols}")
        return i * self._cols + j

    def __getitem__(self, key: tuple[int, int]) -> Any:
        return self._data[self._offset(key)]

    def __setitem__(self, key: tuple[int, int], value: Any) -> None:
        self._data[self._offset(key)] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape() == other.shape() and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix({self._rows}, {self._cols}, {self._data!r})"

    def __str__(self) -> str:
        lines = []
        for i in range(self._rows):
            cells = " ".join(f"{value:8.4f}" for value in self.row(i))
            lines.append(f"│{cells} │\n")
        return "".join(lines)

    def row(self, i: int) -> list[Any]:
        if not 0 <= i < self._rows:
            raise IndexError("Row index out of bounds")
        start = i * self._cols
        return self._data[start:start + self._cols]

    def col(self, j: int) -> list[Any]:
        if not 0 <= j < self._cols:
            raise IndexError("Column index out of bounds")
        return self._data[j::self._cols] if self._cols else []

    def diagonal(self) -> list[Any]:
        n = min(self._rows, self._cols)
        return [self._data[i * self._cols + i] for i in range(n)]

    def swap_rows(self, i: int, j: int) -> None:
        """Exchange rows ``i`` and ``j`` in place."""
        if not (0 <= i < self._rows and 0 <= j < self._rows):
            raise IndexError("Row index out of bounds")
        if i == j:
            return
        c = self._cols
        a, b = slice(i * c, (i + 1) * c), slice(j * c, (j + 1) * c)
        self._data[a], self._data[b] = self._data[b], self._data[a]

    # Transforms and reductions -----------------------------------------

    def trace(self) -> Any:
        """Sum of the diagonal elements of a square matrix."""
        if not self.is_square():
            raise DimensionError("Trace defined only for square matrix")
        total = 0.0
        for value in self.diagonal():
            total += value
        return total

    def transpose(self) -> Matrix:
        return Matrix(
            self._cols,
            self._rows,
            (self._data[i * self._cols + j] for j in range(self._cols) for i in range(self._rows)),
        )

    def transpose_inplace(self) -> None:
        if not self.is_square():
            raise DimensionError("In-place transpose requires square matrix")
        self._data = self.transpose()._data

    def map(self, f: Callable[[Any], Any]) -> Matrix:
        return Matrix(self._rows, self._cols, (f(x) for x in self._data))

    def map_inplace(self, f: Callable[[Any], Any]) -> None:
        self._data = [f(x) for x in self._data]

    def _check_same_shape(self, other: Matrix) -> None:
        if self._rows != other._rows:
            raise DimensionError("Rows mismatch")
        if self._cols != other._cols:
            raise DimensionError("Cols mismatch")

    def zip_map(self, other: Matrix, f: Callable[[Any, Any], Any]) -> Matrix:
        self._check_same_shape(other)
        return Matrix(self._rows, self._cols, (f(x, y) for x, y in zip(self._data, other._data)))

    def approx_eq(self, other: Matrix, tol: float) -> bool:
        """True when shapes match and every element differs by at most ``tol``."""
        return self.shape() == other.shape() and all(
            abs(x - y) <= tol for x, y in zip(self._data, other._data)
        )

    def norm_frobenius(self) -> float:
        return math.sqrt(sum(x * x for x in self._data))

    def norm_max(self) -> float:
        return max((abs(x) for x in self._data), default=0.0)

    def _triangular_tol(self) -> float:
        max_abs = max(self.norm_max(), 1.0)
        return _EPSILON * self._rows * max_abs

    def _check_system(self, b: Vector) -> None:
        if not self.is_square():
            raise DimensionError("Triangular solve requires a square matrix")
        if b.dim() != self._rows:
            raise DimensionError(
                f"Right-hand side has dimension {b.dim()}, expected {self._rows}"
            )

    def solve_lower_triangular(self, b: Vector) -> Vector:
        """Solve ``L x = b`` by forward substitution."""
        self._check_system(b)
        n = self._rows
        tol = self._triangular_tol()
        if any(abs(self._data[i * n + j]) > tol for i in range(n) for j in range(i + 1, n)):
            raise InvalidParameterError("Matrix is not lower triangular")

        x = Vector.zeros(n)
        for i in range(n):
            row = self._data[i * n:(i + 1) * n]
            rhs = b[i]
            for j in range(i):
                rhs -= row[j] * x[j]
            diag = row[i]
            if abs(diag) <= tol:
                raise SingularMatrixError(f"Zero pivot at row {i}")
            x[i] = rhs / diag
        return x

    def solve_upper_triangular(self, b: Vector) -> Vector:
        """Solve ``U x = b`` by backward substitution."""
        self._check_system(b)
        n = self._rows
        tol = self._triangular_tol()
        if any(abs(self._data[i * n + j]) > tol for i in range(1, n) for j in range(i)):
            raise InvalidParameterError("Matrix is not upper triangular")

        x = Vector.zeros(n)
        for i in reversed(range(n)):
            row = self._data[i * n:(i + 1) * n]
            rhs = b[i]
            for j in range(i + 1, n):
                rhs -= row[j] * x[j]
            diag = row[i]
            if abs(diag) <= tol:
                raise SingularMatrixError(f"Zero pivot at row {i}")
            x[i] = rhs / diag
        return x

    # Arithmetic ---------------------------------------------------------

    def __add__(self, other: Matrix) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        return Matrix(self._rows, self._cols, (x + y for x, y in zip(self._data, other._data)))

    def __sub__(self, other: Matrix) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        return Matrix(self._rows, self._cols, (x - y for x, y in zip(self._data, other._data)))

    def __neg__(self) -> Matrix:
        return Matrix(self._rows, self._cols, (-x for x in self._data))

    def __mul__(self, scalar: Any) -> Matrix:
        if not isinstance(scalar, Number):
            return NotImplemented
        return Matrix(self._rows, self._cols, (scalar * x for x in self._data))

    def __rmul__(self, scalar: Any) -> Matrix:
        return self.__mul__(scalar)

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Vector):
            if self._cols != other.dim():
                raise DimensionError("Dim mismatch for matrix-vector multiplication")
            values = other.tolist()
            return Vector(
                sum(a * x for a, x in zip(self.row(i), values)) for i in range(self._rows)
            )
        if isinstance(other, Matrix):
            if self._cols != other._rows:
                raise DimensionError("Dim mismatch for multiplication")
            columns = [other.col(j) for j in range(other._cols)]
            return Matrix(
                self._rows,
                other._cols,
                (
                    sum(a * b for a, b in zip(self.row(i), column))
                    for i in range(self._rows)
                    for column in columns
                ),
            )
        return NotImplemented


def matmul(a: Matrix, b: Matrix) -> Matrix:
    """Matrix product ``a @ b``."""
    return a @ b


def matvec(a: Matrix, x: Vector) -> Vector:
    """Matrix-vector product ``a @ x``."""
    return a @ x


def solve_lower_triangular(l: Matrix, b: Vector) -> Vector:  # noqa: E741
    """Solve ``l x = b`` for lower-triangular ``l``."""
    return l.solve_lower_triangular(b)


def solve_upper_triangular(u: Matrix, b: Vector) -> Vector:
    """Solve ``u x = b`` for upper-triangular ``u``."""
    return u.solve_upper_triangular(b)