"""
Dense matrix container.

DenseMatrix is the input and inspection representation for the sparse
engine: literal matrices are written densely, converted to CSR, and results
are converted back to dense for checking. Data is kept in a row-major 2-D
numpy array whose dtype is the matrix's bound element type.
"""

import logging

import numpy as np

from . import backend_selection
from .dtypes import ElementType, check_same_type
from .errors import (
    DimensionMismatchError,
    NotSquareError,
    OutOfRangeError,
    ShapeMismatchError,
)
from .linalg import cofactor_determinant

logger = logging.getLogger(__name__)


class DenseMatrix:
    """
    A rows x cols matrix bound to one element type.

    The shape is fixed at construction; individual elements are mutable.
    Element access is bounds checked and negative indices are rejected
    rather than wrapped.
    """

    __array_ufunc__ = None

    def __init__(self, rows: int, cols: int, fill=0, dtype=None):
        if rows < 0 or cols < 0:
            raise ShapeMismatchError(f"negative shape {(rows, cols)}")
        self._dtype = backend_selection.resolve_dtype(dtype)
        self._data = np.full((rows, cols), self._dtype.cast(fill), dtype=self._dtype.numpy_dtype)

    @classmethod
    def _wrap(cls, data: np.ndarray, dtype: ElementType):
        """Wrap an array we own without copying"""
        out = cls.__new__(cls)
        out._dtype = dtype
        out._data = data
        return out

    @classmethod
    def from_rows(cls, rows, dtype=None):
        """
        Build from literal row data. The column count is taken from the
        first row; every other row must have the same length.
        """
        rows = [list(r) for r in rows]
        if not rows or not rows[0]:
            raise ShapeMismatchError("literal matrix needs at least one non-empty row")
        cols = len(rows[0])
        for i, r in enumerate(rows):
            if len(r) != cols:
                raise ShapeMismatchError(
                    f"row {i} has {len(r)} elements, expected {cols}", left=cols, right=len(r)
                )
        dtype = backend_selection.resolve_dtype(dtype)
        return cls._wrap(np.array(rows, dtype=dtype.numpy_dtype), dtype)

    @classmethod
    def from_numpy(cls, array, dtype=None):
        array = np.asarray(array)
        if array.ndim != 2:
            raise ShapeMismatchError(f"expected a 2-D array, got {array.ndim} dimensions")
        dtype = backend_selection.resolve_dtype(dtype)
        return cls._wrap(array.astype(dtype.numpy_dtype, copy=True), dtype)

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self):
        return self._data.shape

    @property
    def is_square(self) -> bool:
        return self.rows == self.cols

    @property
    def dtype(self) -> ElementType:
        return self._dtype

    def __repr__(self) -> str:
        return f"DenseMatrix({self._data.tolist()}, dtype={self._dtype.name})"

    def __str__(self) -> str:
        return self._data.__str__()

    ############################
    ### GET AND SET ELEMENTS ###
    ############################
    def _check_index(self, row, col):
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfRangeError((row, col), self.shape)

    def at(self, row: int, col: int):
        self._check_index(row, col)
        return self._data[row, col]

    def set(self, row: int, col: int, value):
        self._check_index(row, col)
        self._data[row, col] = self._dtype.cast(value)

    def __getitem__(self, idxs):
        row, col = idxs
        return self.at(row, col)

    def __setitem__(self, idxs, value):
        row, col = idxs
        self.set(row, col, value)

    #######################
    ### MATH OPERATIONS ###
    #######################
    def add(self, other: "DenseMatrix") -> "DenseMatrix":
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"cannot add matrices of shape {self.shape} and {other.shape}",
                left=self.shape, right=other.shape,
            )
        check_same_type(self._dtype, other._dtype, "add")
        return DenseMatrix._wrap(self._data + other._data, self._dtype)

    def multiply(self, other: "DenseMatrix") -> "DenseMatrix":
        if self.cols != other.rows:
            raise DimensionMismatchError(
                f"cannot multiply matrices of shape {self.shape} and {other.shape}",
                left=self.shape, right=other.shape,
            )
        check_same_type(self._dtype, other._dtype, "multiply")
        out = np.zeros((self.rows, other.cols), dtype=self._dtype.numpy_dtype)
        np.matmul(self._data, other._data, out=out)
        return DenseMatrix._wrap(out, self._dtype)

    def transpose(self) -> "DenseMatrix":
        return DenseMatrix._wrap(self._data.T.copy(), self._dtype)

    @property
    def T(self):
        return self.transpose()

    def trace(self):
        if not self.is_square:
            raise NotSquareError("trace", self.shape)
        total = self._dtype.zero
        for i in range(self.rows):
            total += self._data[i, i]
        return total

    def determinant(self):
        if not self.is_square:
            raise NotSquareError("determinant", self.shape)
        return cofactor_determinant(self._data)

    def __add__(self, other):
        if not isinstance(other, DenseMatrix):
            return NotImplemented
        return self.add(other)

    def __matmul__(self, other):
        if not isinstance(other, DenseMatrix):
            return NotImplemented
        return self.multiply(other)

    ##################
    ### CONVERSION ###
    ##################
    def numpy(self) -> np.ndarray:
        """Copy of the underlying data"""
        return self._data.copy()

    def tolist(self):
        return self._data.tolist()

    def equals(self, other: "DenseMatrix") -> bool:
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def allclose(self, other: "DenseMatrix", rtol=1e-5, atol=1e-8) -> bool:
        return self.shape == other.shape and bool(np.allclose(self._data, other._data, rtol=rtol, atol=atol))
