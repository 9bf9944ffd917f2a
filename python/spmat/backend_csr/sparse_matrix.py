"""
This file is the main entry point for the CSR engine. A SparseBackendDevice
wraps one of the implementation modules (pure python loops, or vectorised
numpy), and SparseMatrix is a thin front end that keeps a device and a
CSRArray handle. Shape checks, element type checks and error reporting live
here; the algorithms themselves live in the backend modules.
"""

import logging

import numpy as np

from .. import backend_selection
from ..dense_matrix import DenseMatrix
from ..dtypes import ElementType, check_same_type
from ..errors import (
    CSRFormatError,
    DeviceMismatchError,
    DimensionMismatchError,
    NotSquareError,
    OutOfRangeError,
    ShapeMismatchError,
)
from . import csr_backend_numpy
from . import csr_backend_py

logger = logging.getLogger(__name__)


class SparseBackendDevice:
    """
    Wraps a CSR backend module. Attribute access is forwarded to the module,
    so device.matmul(a, b, out) calls the backend's matmul.
    """

    def __init__(self, name, mod):
        self.name = name
        self.mod = mod

    def __eq__(self, other):
        return isinstance(other, SparseBackendDevice) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return self.name + "()"

    def __getattr__(self, name):
        return getattr(self.mod, name)

    def enabled(self):
        return self.mod is not None


def csr_py():
    """Return the pure python device"""
    return SparseBackendDevice("csr_py", csr_backend_py)


def csr_numpy():
    """Return the vectorised numpy device"""
    return SparseBackendDevice("csr_numpy", csr_backend_numpy)


def default_device():
    """Device selected by SPMAT_BACKEND"""
    return csr_numpy() if backend_selection.BACKEND == "numpy" else csr_py()


def all_devices():
    """return a list of all available devices"""
    return [csr_py(), csr_numpy()]


##################
### VALIDATION ###
##################
def _index_array(x, name):
    arr = np.asarray(x)
    if arr.size and arr.dtype.kind not in "iu":
        raise CSRFormatError(f"{name} must hold integers, got {arr.dtype}")
    return np.array(arr, dtype=csr_backend_py._index_type).reshape((-1,))


def validate_csr(values: np.ndarray, col_idx: np.ndarray, row_ptr: np.ndarray, shape):
    """
    Check the CSR invariants on raw arrays.

    Raises:
        CSRFormatError: on the first violated invariant.
    """
    rows, cols = shape
    if rows < 0 or cols < 0:
        raise CSRFormatError(f"negative shape {tuple(shape)}")
    if row_ptr.size != rows + 1:
        raise CSRFormatError(f"row_ptr has {row_ptr.size} entries, expected rows + 1 = {rows + 1}")
    if row_ptr[0] != 0:
        raise CSRFormatError(f"row_ptr must start at 0, got {row_ptr[0]}")
    if values.size != col_idx.size:
        raise CSRFormatError(f"values has {values.size} entries but col_idx has {col_idx.size}")
    if row_ptr[-1] != values.size:
        raise CSRFormatError(f"row_ptr ends at {row_ptr[-1]}, expected nnz = {values.size}")
    if np.any(np.diff(row_ptr) < 0):
        raise CSRFormatError("row_ptr must be non-decreasing")
    if col_idx.size and (col_idx.min() < 0 or col_idx.max() >= cols):
        raise CSRFormatError(f"column index out of range for {cols} columns")

    # consecutive entries of the same row need strictly increasing columns
    row_start = np.zeros(col_idx.size, dtype=np.bool_)
    row_start[row_ptr[:-1][row_ptr[:-1] < col_idx.size]] = True
    bad = (np.diff(col_idx) <= 0) & ~row_start[1:]
    if np.any(bad):
        k = int(np.flatnonzero(bad)[0]) + 1
        raise CSRFormatError(
            f"columns not strictly increasing within a row at entry {k} (column {col_idx[k]})"
        )


class SparseMatrix:
    """
    A compressed sparse row matrix bound to one element type, backed by any
    of the available CSR backends.

    Arithmetic always returns a new SparseMatrix whose arrays are freshly
    allocated; the only in-place operation is scale_in_place (and *=).
    Operations with a DenseMatrix promote this matrix to dense and return a
    DenseMatrix.
    """

    # numpy scalars must defer to our reflected operators
    __array_ufunc__ = None

    def __init__(self, other, device=None, dtype=None):
        """
        Build from another SparseMatrix (copy), from a DenseMatrix, or from
        anything numpy can turn into a 2-D array (converted to CSR).
        """
        if isinstance(other, SparseMatrix):
            device = device if device is not None else other._device
            array = other.to(device)
            if array is other:
                array = other.copy()
            self._init(array)
            return

        if isinstance(other, DenseMatrix):
            dtype = other.dtype if dtype is None else dtype
            other = other.numpy()

        dtype = backend_selection.resolve_dtype(dtype)
        other = np.asarray(other)
        if other.ndim != 2:
            raise ShapeMismatchError(f"expected a 2-D matrix, got {other.ndim} dimensions")
        other = other.astype(dtype.numpy_dtype)

        device = device if device is not None else default_device()
        array = self.make(other.shape, dtype=dtype, device=device)
        array._device.from_numpy(other, array._handle)
        logger.debug("converted %s dense matrix to CSR, nnz=%d", other.shape, array.nnz)
        self._init(array)

    def _init(self, other):
        self._device = other._device
        self._handle = other._handle

    @staticmethod
    def make(shape, dtype=None, device=None):
        """Create an empty (all structural zeros) matrix of the given shape."""
        if device is None:
            device = default_device()
        dtype = backend_selection.resolve_dtype(dtype)

        array = SparseMatrix.__new__(SparseMatrix)
        array._device = device
        array._handle = device.CSRArray(tuple(shape), dtype)
        return array

    @classmethod
    def from_csr(cls, values, col_idx, row_ptr, shape, dtype=None, device=None):
        """
        Build from raw CSR arrays after checking every CSR invariant.
        The arrays are copied.

        Raises:
            CSRFormatError: If the arrays do not describe a valid CSR matrix.
        """
        dtype = backend_selection.resolve_dtype(dtype)
        values = np.array(values, dtype=dtype.numpy_dtype).reshape((-1,))
        col_idx = _index_array(col_idx, "col_idx")
        row_ptr = _index_array(row_ptr, "row_ptr")
        validate_csr(values, col_idx, row_ptr, shape)
        return cls.from_csr_unchecked(values, col_idx, row_ptr, shape, dtype=dtype, device=device)

    @classmethod
    def from_csr_unchecked(cls, values, col_idx, row_ptr, shape, dtype=None, device=None):
        """
        Build from raw CSR arrays without checking the invariants. Unsorted
        or duplicate columns give meaningless (but memory safe) results
        from at, add and multiply.
        """
        out = cls.make(shape, dtype=dtype, device=device)
        out._device.from_csr(values, col_idx, row_ptr, out._handle)
        return out

    ###############
    ### QUERIES ###
    ###############
    @property
    def shape(self):
        return self._handle.shape

    @property
    def rows(self) -> int:
        return self._handle.shape[0]

    @property
    def cols(self) -> int:
        return self._handle.shape[1]

    @property
    def is_square(self) -> bool:
        return self.rows == self.cols

    @property
    def nnz(self) -> int:
        """Number of stored entries (which may include stored zeros)"""
        return self._handle.nnz

    @property
    def density(self) -> float:
        size = self.rows * self.cols
        return self.nnz / size if size else 0.0

    @property
    def dtype(self) -> ElementType:
        return self._handle.dtype

    @property
    def device(self):
        return self._device

    @staticmethod
    def _readonly(arr):
        view = arr.view()
        view.flags.writeable = False
        return view

    @property
    def values(self):
        return self._readonly(self._handle.values)

    @property
    def col_idx(self):
        return self._readonly(self._handle.col_idx)

    @property
    def row_ptr(self):
        return self._readonly(self._handle.row_ptr)

    def __repr__(self) -> str:
        return (f"SparseMatrix(shape={self.shape}, nnz={self.nnz}, "
                f"dtype={self.dtype.name}, device={self._device})")

    def __str__(self) -> str:
        return self.numpy().__str__()

    def at(self, row: int, col: int):
        """Stored value at (row, col), or zero if nothing is stored there"""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfRangeError((row, col), self.shape)
        return self._device.getitem(self._handle, row, col)

    def __getitem__(self, idxs):
        row, col = idxs
        return self.at(row, col)

    ##################
    ### CONVERSION ###
    ##################
    def numpy(self):
        """Convert to a dense numpy array"""
        return self._device.to_numpy(self._handle)

    def to_dense(self) -> DenseMatrix:
        return DenseMatrix._wrap(self.numpy(), self.dtype)

    def to(self, device):
        """Move to another device, the handle layout is shared so this only copies arrays."""
        if device == self._device:
            return self
        out = SparseMatrix.make(self.shape, dtype=self.dtype, device=device)
        device.copy(self._handle, out._handle)
        return out

    def copy(self):
        out = SparseMatrix.make(self.shape, dtype=self.dtype, device=self._device)
        self._device.copy(self._handle, out._handle)
        return out

    def eliminate_zeros(self):
        """Copy of this matrix with stored zeros removed"""
        out = SparseMatrix.make(self.shape, dtype=self.dtype, device=self._device)
        self._device.eliminate_zeros(self._handle, out._handle)
        return out

    ##################
    ### REDUCTIONS ###
    ##################
    def trace(self):
        if not self.is_square:
            raise NotSquareError("trace", self.shape)
        return self._device.trace(self._handle)

    def determinant(self):
        """
        Determinant by cofactor expansion of the dense form.

        Runs in O(n!) time: fine for the small matrices this library is
        meant for, hopeless beyond n of about 10. A warning is logged when
        n exceeds SPMAT_DET_WARN_ORDER.
        """
        if not self.is_square:
            raise NotSquareError("determinant", self.shape)
        return self.to_dense().determinant()

    ######################
    ### SCALAR SCALING ###
    ######################
    def scale_in_place(self, scalar):
        """
        Multiply every stored value by scalar (cast to the element type).
        The sparsity structure is untouched, so scaling by zero leaves
        stored zeros behind.
        """
        self._device.scalar_mul(self._handle, scalar)
        return self

    def scale(self, scalar):
        return self.copy().scale_in_place(scalar)

    def __imul__(self, scalar):
        if isinstance(scalar, (SparseMatrix, DenseMatrix)):
            return NotImplemented
        return self.scale_in_place(scalar)

    def __mul__(self, scalar):
        if isinstance(scalar, (SparseMatrix, DenseMatrix)):
            return NotImplemented
        return self.scale(scalar)

    __rmul__ = __mul__

    ##################
    ### ARITHMETIC ###
    ##################
    def _check_operand(self, other, operation):
        check_same_type(self.dtype, other.dtype, operation)
        if other._device != self._device:
            raise DeviceMismatchError(
                f"cannot {operation} matrices on devices {self._device} and {other._device}"
            )

    def add(self, other, sparsify: bool = True):
        """
        Sum of two matrices of the same shape.

        With sparsify (the default) entries that cancel to exactly zero are
        not stored; pass sparsify=False to keep them. at() returns the same
        values either way. A DenseMatrix operand gives a DenseMatrix result.
        """
        if isinstance(other, DenseMatrix):
            return self.to_dense().add(other)
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"cannot add matrices of shape {self.shape} and {other.shape}",
                left=self.shape, right=other.shape,
            )
        self._check_operand(other, "add")

        out = SparseMatrix.make(self.shape, dtype=self.dtype, device=self._device)
        self._device.ewise_add(self._handle, other._handle, out._handle, sparsify=sparsify)
        logger.debug("add %s: nnz %d + %d -> %d", self.shape, self.nnz, other.nnz, out.nnz)
        return out

    def multiply(self, other):
        """
        Matrix product. Entries of the result that are exactly zero are not
        stored. A DenseMatrix operand gives a DenseMatrix result.
        """
        if isinstance(other, DenseMatrix):
            return self.to_dense().multiply(other)
        if self.cols != other.rows:
            raise DimensionMismatchError(
                f"cannot multiply matrices of shape {self.shape} and {other.shape}",
                left=self.shape, right=other.shape,
            )
        self._check_operand(other, "multiply")

        out = SparseMatrix.make((self.rows, other.cols), dtype=self.dtype, device=self._device)
        self._device.matmul(self._handle, other._handle, out._handle)
        logger.debug("multiply %s x %s: nnz %d, %d -> %d",
                     self.shape, other.shape, self.nnz, other.nnz, out.nnz)
        return out

    def transpose(self):
        out = SparseMatrix.make((self.cols, self.rows), dtype=self.dtype, device=self._device)
        self._device.transpose(self._handle, out._handle)
        return out

    @property
    def T(self):
        return self.transpose()

    def __add__(self, other):
        if not isinstance(other, (SparseMatrix, DenseMatrix)):
            return NotImplemented
        return self.add(other)

    def __radd__(self, other):
        if not isinstance(other, DenseMatrix):
            return NotImplemented
        return other.add(self.to_dense())

    def __matmul__(self, other):
        if not isinstance(other, (SparseMatrix, DenseMatrix)):
            return NotImplemented
        return self.multiply(other)

    def __rmatmul__(self, other):
        if not isinstance(other, DenseMatrix):
            return NotImplemented
        return other.multiply(self.to_dense())


###########################
### CONVENIENCE METHODS ###
###########################

def array(a, dtype=None, device=None):
    """Convenience method for creating sparse matrices from dense data"""
    return SparseMatrix(a, device=device, dtype=dtype)


def csr_array(values, col_idx, row_ptr, shape, dtype=None, device=None):
    return SparseMatrix.from_csr(values, col_idx, row_ptr, shape, dtype=dtype, device=device)


def zeros(shape, dtype=None, device=None):
    return SparseMatrix.make(shape, dtype=dtype, device=device)


def identity(n, dtype=None, device=None):
    dtype = backend_selection.resolve_dtype(dtype)
    return SparseMatrix.from_csr_unchecked(
        np.ones(n, dtype=dtype.numpy_dtype),
        np.arange(n),
        np.arange(n + 1),
        (n, n), dtype=dtype, device=device,
    )
