"""Compressed sparse row (CSR) and compressed sparse column (CSC) matrices."""

from __future__ import annotations

from bisect import bisect_left
from numbers import Number
from typing import Any, Iterable, Iterator, Sequence

from .errors import DimensionError
from .matrix import Matrix
from .vector import Vector


def _find(indices: Sequence[int], start: int, end: int, target: int) -> int | None:
    """Position of ``target`` in the sorted slice ``indices[start:end]``, if stored."""
    pos = bisect_left(indices, target, start, end)
    if pos < end and indices[pos] == target:
        return pos
    return None


def _compressed_valid(
    outer: int, inner: int, ptr: Sequence[int], idx: Sequence[int], data: Sequence[Any]
) -> bool:
    if len(ptr) != outer + 1 or len(idx) != len(data):
        return False
    if (ptr[-1] if ptr else 0) != len(data):
        return False
    for k in range(outer):
        start, end = ptr[k], ptr[k + 1]
        if start > end or end > len(data):
            return False
        segment = idx[start:end]
        if any(value >= inner for value in segment):
            return False
        if any(b <= a for a, b in zip(segment, segment[1:])):
            return False
    return True


def _summary(kind: str, rows: int, cols: int, nnz: int, density: float) -> str:
    return f"{kind} {rows}x{cols}, nnz={nnz}, density={density * 100.0:.2f}%\n"


class CsrMatrix:
    """Sparse matrix stored row by row: ``row_ptr``, ``col_idx`` and ``data``."""

    __slots__ = ("_rows", "_cols", "_row_ptr", "_col_idx", "_data")

    def __init__(
        self,
        rows: int,
        cols: int,
        row_ptr: Iterable[int],
        col_idx: Iterable[int],
        data: Iterable[Any],
    ) -> None:
        self._rows = rows
        self._cols = cols
        self._row_ptr = list(row_ptr)
        self._col_idx = list(col_idx)
        self._data = list(data)

    @classmethod
    def from_dense(cls, matrix: Matrix) -> CsrMatrix:
        """Compress a dense matrix, keeping only non-zero entries."""
        rows, cols = matrix.shape()
        row_ptr = [0]
        col_idx: list[int] = []
        data: list[Any] = []
        for row in matrix.tolist():
            for j, value in enumerate(row):
                if value != 0:
                    col_idx.append(j)
                    data.append(value)
            row_ptr.append(len(col_idx))
        return cls(rows, cols, row_ptr, col_idx, data)

    @classmethod
    def empty(cls, rows: int, cols: int) -> CsrMatrix:
        """A matrix with no stored entries."""
        return cls(rows, cols, [0] * (rows + 1), [], [])

    def nnz(self) -> int:
        """Number of stored entries."""
        return len(self._data)

    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    def is_square(self) -> bool:
        return self._rows == self._cols

    def is_empty(self) -> bool:
        return not self._data

    def density(self) -> float:
        """Fraction of entries that are stored."""
        if self._rows == 0 or self._cols == 0:
            return 0.0
        return self.nnz() / (self._rows * self._cols)

    def transpose_csc(self) -> CscMatrix:
        """Reinterpret the same arrays as the CSC form of the transpose."""
        return CscMatrix(self._cols, self._rows, self._row_ptr, self._col_idx, self._data)

    def row_data(self, i: int) -> tuple[list[int], list[Any]]:
        """Column indices and values stored in row ``i``."""
        start, end = self._row_ptr[i], self._row_ptr[i + 1]
        return self._col_idx[start:end], self._data[start:end]

    def row_nnz(self, i: int) -> int:
        return self._row_ptr[i + 1] - self._row_ptr[i]

    def is_valid(self) -> bool:
        """True when the arrays describe a well-formed CSR matrix."""
        return _compressed_valid(self._rows, self._cols, self._row_ptr, self._col_idx, self._data)

    def iter_nonzero(self) -> Iterator[tuple[int, int, Any]]:
        """Yield ``(row, col, value)`` for every stored entry in row order."""
        for i in range(self._rows):
            for k in range(self._row_ptr[i], self._row_ptr[i + 1]):
                yield i, self._col_idx[k], self._data[k]

    def to_csc(self) -> CscMatrix:
        """Convert to compressed sparse column form."""
        nnz = self.nnz()
        col_ptr = [0] * (self._cols + 1)
        for col in self._col_idx:
            col_ptr[col + 1] += 1
        for j in range(1, self._cols + 1):
            col_ptr[j] += col_ptr[j - 1]

        pos = col_ptr[: self._cols]
        row_idx = [0] * nnz
        data: list[Any] = [0.0] * nnz
        for i, col, value in self.iter_nonzero():
            dest = pos[col]
            row_idx[dest] = i
            data[dest] = value
            pos[col] += 1
        return CscMatrix(self._rows, self._cols, col_ptr, row_idx, data)

    def transpose(self) -> CsrMatrix:
        return self.to_csc().transpose_csr()

    def to_dense(self) -> Matrix:
        out = Matrix.zeros(self._rows, self._cols)
        for i, j, value in self.iter_nonzero():
            out[i, j] = value
        return out

    def _check_bounds(self, i: int, j: int) -> None:
        if not (0 <= i < self._rows and 0 <= j < self._cols):
            raise IndexError("Index out of bounds")

    def get(self, i: int, j: int) -> Any:
        """Entry ``(i, j)``, zero when it is not stored."""
        self._check_bounds(i, j)
        pos = _find(self._col_idx, self._row_ptr[i], self._row_ptr[i + 1], j)
        return 0.0 if pos is None else self._data[pos]

    def __getitem__(self, key: tuple[int, int]) -> Any:
        """Stored entry ``(i, j)``; raises KeyError when it is not stored."""
        i, j = key
        self._check_bounds(i, j)
        pos = _find(self._col_idx, self._row_ptr[i], self._row_ptr[i + 1], j)
        if pos is None:
            raise KeyError(f"Element at ({i}, {j}) is zero (not stored in sparse matrix)")
        return self._data[pos]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CsrMatrix):
            return NotImplemented
        return (
            self.shape() == other.shape()
            and self._row_ptr == other._row_ptr
            and self._col_idx == other._col_idx
            and self._data == other._data
        )

    __hash__ = None  # type: ignore[assignment]

    def __neg__(self) -> CsrMatrix:
        return CsrMatrix(self._rows, self._cols, self._row_ptr, self._col_idx, (-v for v in self._data))

    def __mul__(self, scalar: Any) -> CsrMatrix:
        if not isinstance(scalar, Number):
            return NotImplemented
        return CsrMatrix(
            self._rows, self._cols, self._row_ptr, self._col_idx, (scalar * v for v in self._data)
        )

    def __rmul__(self, scalar: Any) -> CsrMatrix:
        return self.__mul__(scalar)

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Vector):
            if self._cols != other.dim():
                raise DimensionError("Dim mismatch for matrix-vector multiplication")
            x = other.tolist()
            return Vector(
                sum(
                    (self._data[k] * x[self._col_idx[k]]
                     for k in range(self._row_ptr[i], self._row_ptr[i + 1])),
                    0.0,
                )
                for i in range(self._rows)
            )
        if isinstance(other, Matrix):
            if self._cols != other.rows():
                raise DimensionError("Dim mismatch for multiplication")
            n = other.cols()
            rhs = other.tolist()
            result: list[float] = []
            for i in range(self._rows):
                acc = [0.0] * n
                for k in range(self._row_ptr[i], self._row_ptr[i + 1]):
                    value = self._data[k]
                    for j, b in enumerate(rhs[self._col_idx[k]]):
                        acc[j] += value * b
                result.extend(acc)
            return Matrix(self._rows, n, result)
        return NotImplemented

    def negate_inplace(self) -> None:
        self._data = [-v for v in self._data]

    def scale_inplace(self, scalar: Any) -> None:
        self._data = [v * scalar for v in self._data]

    def approx_eq(self, other: CsrMatrix, tol: float) -> bool:
        """Same structure and every stored value within ``tol``."""
        return (
            self.shape() == other.shape()
            and self._row_ptr == other._row_ptr
            and self._col_idx == other._col_idx
            and len(self._data) == len(other._data)
            and all(abs(x - y) <= tol for x, y in zip(self._data, other._data))
        )

    def __str__(self) -> str:
        lines = [_summary("CsrMatrix", self._rows, self._cols, self.nnz(), self.density())]
        lines.extend(f"  ({i}, {j}) = {value:.6f}\n" for i, j, value in self.iter_nonzero())
        return "".join(lines)


class CscMatrix:
    """Sparse matrix stored column by column: ``col_ptr``, ``row_idx`` and ``data``."""

    __slots__ = ("_rows", "_cols", "_col_ptr", "_row_idx", "_data")

    def __init__(
        self,
        rows: int,
        cols: int,
        col_ptr: Iterable[int],
        row_idx: Iterable[int],
        data: Iterable[Any],
    ) -> None:
        self._rows = rows
        self._cols = cols
        self._col_ptr = list(col_ptr)
        self._row_idx = list(row_idx)
        self._data = list(data)

    @classmethod
    def from_dense(cls, matrix: Matrix) -> CscMatrix:
        """Compress a dense matrix, keeping only non-zero entries."""
        rows, cols = matrix.shape()
        col_ptr = [0]
        row_idx: list[int] = []
        data: list[Any] = []
        for j in range(cols):
            for i, value in enumerate(matrix.col(j)):
                if value != 0:
                    row_idx.append(i)
                    data.append(value)
            col_ptr.append(len(row_idx))
        return cls(rows, cols, col_ptr, row_idx, data)

    @classmethod
    def empty(cls, rows: int, cols: int) -> CscMatrix:
        """A matrix with no stored entries."""
        return cls(rows, cols, [0] * (cols + 1), [], [])

    def nnz(self) -> int:
        """Number of stored entries."""
        return len(self._data)

    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    def is_square(self) -> bool:
        return self._rows == self._cols

    def is_empty(self) -> bool:
        return not self._data

    def density(self) -> float:
        """Fraction of entries that are stored."""
        if self._rows == 0 or self._cols == 0:
            return 0.0
        return self.nnz() / (self._rows * self._cols)

    def transpose_csr(self) -> CsrMatrix:
        """Reinterpret the same arrays as the CSR form of the transpose."""
        return CsrMatrix(self._cols, self._rows, self._col_ptr, self._row_idx, self._data)

    def col_data(self, j: int) -> tuple[list[int], list[Any]]:
        """Row indices and values stored in column ``j``."""
        start, end = self._col_ptr[j], self._col_ptr[j + 1]
        return self._row_idx[start:end], self._data[start:end]

    def col_nnz(self, j: int) -> int:
        return self._col_ptr[j + 1] - self._col_ptr[j]

    def is_valid(self) -> bool:
        """True when the arrays describe a well-formed CSC matrix."""
        return _compressed_valid(self._cols, self._rows, self._col_ptr, self._row_idx, self._data)

    def _entries(self) -> Iterator[tuple[int, int, Any]]:
        for j in range(self._cols):
            for k in range(self._col_ptr[j], self._col_ptr[j + 1]):
                yield self._row_idx[k], j, self._data[k]

    def to_csr(self) -> CsrMatrix:
        """Convert to compressed sparse row form."""
        nnz = self.nnz()
        row_ptr = [0] * (self._rows + 1)
        for row in self._row_idx:
            row_ptr[row + 1] += 1
        for i in range(1, self._rows + 1):
            row_ptr[i] += row_ptr[i - 1]

        pos = row_ptr[: self._rows]
        col_idx = [0] * nnz
        data: list[Any] = [0.0] * nnz
        for row, j, value in self._entries():
            dest = pos[row]
            col_idx[dest] = j
            data[dest] = value
            pos[row] += 1
        return CsrMatrix(self._rows, self._cols, row_ptr, col_idx, data)

    def transpose(self) -> CscMatrix:
        return self.to_csr().transpose_csc()

    def to_dense(self) -> Matrix:
        out = Matrix.zeros(self._rows, self._cols)
        for i, j, value in self._entries():
            out[i, j] = value
        return out

    def _check_bounds(self, i: int, j: int) -> None:
        if not (0 <= i < self._rows and 0 <= j < self._cols):
            raise IndexError("Index out of bounds")

    def get(self, i: int, j: int) -> Any:
        """Entry ``(i, j)``, zero when it is not stored."""
        self._check_bounds(i, j)
        pos = _find(self._row_idx, self._col_ptr[j], self._col_ptr[j + 1], i)
        return 0.0 if pos is None else self._data[pos]

    def __getitem__(self, key: tuple[int, int]) -> Any:
        """Stored entry ``(i, j)``; raises KeyError when it is not stored."""
        i, j = key
        self._check_bounds(i, j)
        pos = _find(self._row_idx, self._col_ptr[j], self._col_ptr[j + 1], i)
        if pos is None:
            raise KeyError(f"Element at ({i}, {j}) is zero (not stored in sparse matrix)")
        return self._data[pos]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CscMatrix):
            return NotImplemented
        return (
            self.shape() == other.shape()
            and self._col_ptr == other._col_ptr
            and self._row_idx == other._row_idx
            and self._data == other._data
        )

    __hash__ = None  # type: ignore[assignment]

    def __neg__(self) -> CscMatrix:
        return CscMatrix(self._rows, self._cols, self._col_ptr, self._row_idx, (-v for v in self._data))

    def __mul__(self, scalar: Any) -> CscMatrix:
        if not isinstance(scalar, Number):
            return NotImplemented
        return CscMatrix(
            self._rows, self._cols, self._col_ptr, self._row_idx, (scalar * v for v in self._data)
        )

    def __rmul__(self, scalar: Any) -> CscMatrix:
        return self.__mul__(scalar)

    def __matmul__(self, other: Any) -> Any:
        if not isinstance(other, Vector):
            return NotImplemented
        if self._cols != other.dim():
            raise DimensionError("Dim mismatch for matrix-vector multiplication")
        acc = [0.0] * self._rows
        for j, xj in enumerate(other):
            if xj == 0:
                continue
            for k in range(self._col_ptr[j], self._col_ptr[j + 1]):
                acc[self._row_idx[k]] += self._data[k] * xj
        return Vector(acc)

    def __rmatmul__(self, other: Any) -> Any:
        if not isinstance(other, Matrix):
            return NotImplemented
        if other.cols() != self._rows:
            raise DimensionError("Dim mismatch for multiplication")
        m, n = other.rows(), self._cols
        lhs = other.tolist()
        acc = [[0.0] * n for _ in range(m)]
        for row, j, value in self._entries():
            for i in range(m):
                acc[i][j] += lhs[i][row] * value
        return Matrix(m, n, (v for r in acc for v in r))

    def negate_inplace(self) -> None:
        self._data = [-v for v in self._data]

    def scale_inplace(self, scalar: Any) -> None:
        self._data = [v * scalar for v in self._data]

    def approx_eq(self, other: CscMatrix, tol: float) -> bool:
        """Same structure and every stored value within ``tol``."""
        return (
            self.shape() == other.shape()
            and self._col_ptr == other._col_ptr
            and self._row_idx == other._row_idx
            and len(self._data) == len(other._data)
            and all(abs(x - y) <= tol for x, y in zip(self._data, other._data))
        )

    def __str__(self) -> str:
        lines = [_summary("CscMatrix", self._rows, self._cols, self.nnz(), self.density())]
        lines.extend(f"  ({i}, {j}) = {value:.6f}\n" for i, j, value in self._entries())
        return "".join(lines)