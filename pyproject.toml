[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linalgkit"
version = "0.1.0"
description = "Dense and sparse linear algebra: decompositions, iterative solvers, eigenvalue methods and SVD"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "linear algebra",
    "matrix",
    "sparse",
    "CSR",
    "CSC",
    "LU",
    "QR",
    "LDLT",
    "eigenvalues",
    "SVD",
    "GMRES",
    "numerical methods",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["linalgkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
