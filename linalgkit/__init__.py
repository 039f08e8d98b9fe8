"""Dense and sparse linear algebra: decompositions, iterative solvers, eigenvalue methods and SVD."""

__version__ = "0.1.0"

__all__ = [
    "decomp",
    "eigen",
    "errors",
    "iterative",
    "matrix",
    "numeric",
    "sparse",
    "svd",
    "vector",
]