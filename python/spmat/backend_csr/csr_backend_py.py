from collections import deque

import numpy as np

from ..dtypes import ElementType

__device_name__ = "python"
_index_type = np.int64


#################
### CSR ARRAY ###
#################
class CSRArray:
    """
    Compressed sparse row storage.

    values[k] is stored at (r, col_idx[k]) for row_ptr[r] <= k < row_ptr[r+1].
    Within a row the column indices are strictly increasing. The arrays are
    only type checked here; the CSR invariants are the caller's business
    (see validate_csr in sparse_matrix.py).
    """

    def __init__(self,
                 shape: tuple[int, int],
                 dtype: ElementType,
                 values: np.ndarray = None,
                 col_idx: np.ndarray = None,
                 row_ptr: np.ndarray = None):
        self.shape = tuple(shape)
        self.dtype = dtype

        if values is None:
            self.values = np.empty((0,), dtype=dtype.numpy_dtype)
        else:
            self.values = values

        if col_idx is None:
            self.col_idx = np.empty((0,), dtype=_index_type)
        else:
            self.col_idx = col_idx

        if row_ptr is None:
            self.row_ptr = np.zeros((self.shape[0] + 1,), dtype=_index_type)
        else:
            self.row_ptr = row_ptr

        CSRArray.check(self)

    @property
    def nnz(self):
        return self.values.size

    @staticmethod
    def check(a):
        assert len(a.shape) == 2
        assert a.values.dtype == a.dtype.numpy_dtype
        assert a.col_idx.dtype == _index_type
        assert a.row_ptr.dtype == _index_type
        assert a.values.ndim == 1 and a.col_idx.ndim == 1 and a.row_ptr.ndim == 1


#################
### UTILITIES ###
#################
def assign(out: CSRArray, values, col_idx, row_ptr):
    """Store freshly built sequences into out, converting them to arrays"""
    out.values = np.array(values, dtype=out.dtype.numpy_dtype).reshape((-1,))
    out.col_idx = np.array(col_idx, dtype=_index_type).reshape((-1,))
    out.row_ptr = np.array(row_ptr, dtype=_index_type).reshape((-1,))
    CSRArray.check(out)


def from_csr(values, col_idx, row_ptr, out: CSRArray):
    assign(out, values, col_idx, row_ptr)


def copy(a: CSRArray, out: CSRArray):
    out.shape = a.shape
    out.dtype = a.dtype
    out.values = a.values.copy()
    out.col_idx = a.col_idx.copy()
    out.row_ptr = a.row_ptr.copy()


######################
### DENSE INTEROP ####
######################
def from_numpy(a: np.ndarray, out: CSRArray):
    """Row-major single pass, storing every element that is not zero"""
    zero = out.dtype.zero
    rows, cols = a.shape
    values, col_idx, row_ptr = [], [], [0]
    for r in range(rows):
        for c in range(cols):
            if a[r, c] != zero:
                values.append(a[r, c])
                col_idx.append(c)
        row_ptr.append(len(values))

    out.shape = (rows, cols)
    assign(out, values, col_idx, row_ptr)


def to_numpy(a: CSRArray):
    out = np.full(a.shape, a.dtype.zero, dtype=a.dtype.numpy_dtype)
    for r in range(a.shape[0]):
        for k in range(a.row_ptr[r], a.row_ptr[r + 1]):
            out[r, a.col_idx[k]] = a.values[k]
    return out


#################
### LOOKUP OPS ###
#################
def getitem(a: CSRArray, row: int, col: int):
    for k in range(a.row_ptr[row], a.row_ptr[row + 1]):
        if a.col_idx[k] == col:
            return a.values[k]
    return a.dtype.zero


def trace(a: CSRArray):
    total = a.dtype.zero
    for r in range(a.shape[0]):
        for k in range(a.row_ptr[r], a.row_ptr[r + 1]):
            if a.col_idx[k] == r:
                total += a.values[k]
                break
    return total


#################
### SCALAR OP ###
#################
def scalar_mul(a: CSRArray, val):
    """In place, the sparsity structure is left as it is even for val == 0"""
    val = a.dtype.cast(val)
    for k in range(a.nnz):
        a.values[k] = a.values[k] * val


def eliminate_zeros(a: CSRArray, out: CSRArray):
    zero = a.dtype.zero
    values, col_idx, row_ptr = deque(), deque(), [0]
    for r in range(a.shape[0]):
        for k in range(a.row_ptr[r], a.row_ptr[r + 1]):
            if a.values[k] != zero:
                values.append(a.values[k])
                col_idx.append(a.col_idx[k])
        row_ptr.append(len(values))

    out.shape = a.shape
    assign(out, values, col_idx, row_ptr)


#################
### EWISE ADD ###
#################
def ewise_add(a: CSRArray, b: CSRArray, out: CSRArray, sparsify: bool = True):
    """
    Row by row two pointer merge of the sorted column lists. Columns present
    in only one operand are copied, shared columns are summed. With sparsify,
    entries that come out exactly zero are not stored.
    """
    assert a.shape == b.shape

    zero = a.dtype.zero
    new_values = deque()
    new_col_idx = deque()
    new_row_ptr = [0]

    for r in range(a.shape[0]):
        a_idx, a_end = a.row_ptr[r], a.row_ptr[r + 1]
        b_idx, b_end = b.row_ptr[r], b.row_ptr[r + 1]

        while a_idx < a_end or b_idx < b_end:
            if b_idx >= b_end or (a_idx < a_end and a.col_idx[a_idx] < b.col_idx[b_idx]):
                col, val = a.col_idx[a_idx], a.values[a_idx]
                a_idx += 1
            elif a_idx >= a_end or b.col_idx[b_idx] < a.col_idx[a_idx]:
                col, val = b.col_idx[b_idx], b.values[b_idx]
                b_idx += 1
            else:
                col, val = a.col_idx[a_idx], a.values[a_idx] + b.values[b_idx]
                a_idx += 1
                b_idx += 1

            if sparsify and val == zero:
                continue
            new_col_idx.append(col)
            new_values.append(val)

        new_row_ptr.append(len(new_values))

    out.shape = a.shape
    assign(out, new_values, new_col_idx, new_row_ptr)


##############
### MATMUL ###
##############
def matmul(a: CSRArray, b: CSRArray, out: CSRArray):
    """
    Row r of the product is accumulated in a dense buffer of length b.cols:
    every stored (k, value) of row r of a scatters value * b[k, :] into it.
    The buffer is then scanned left to right and non-zero positions are
    stored, so columns come out sorted.
    """
    assert a.shape[1] == b.shape[0]

    rows, cols = a.shape[0], b.shape[1]
    zero = a.dtype.zero
    new_values = deque()
    new_col_idx = deque()
    new_row_ptr = [0]

    for r in range(rows):
        acc = [zero] * cols
        for k in range(a.row_ptr[r], a.row_ptr[r + 1]):
            a_val, a_col = a.values[k], a.col_idx[k]
            for kk in range(b.row_ptr[a_col], b.row_ptr[a_col + 1]):
                acc[b.col_idx[kk]] += a_val * b.values[kk]

        for c in range(cols):
            if acc[c] != zero:
                new_values.append(acc[c])
                new_col_idx.append(c)
        new_row_ptr.append(len(new_values))

    out.shape = (rows, cols)
    assign(out, new_values, new_col_idx, new_row_ptr)


#################
### TRANSPOSE ###
#################
def transpose(a: CSRArray, out: CSRArray):
    """Counting sort on column index; walking rows in order keeps output columns sorted"""
    rows, cols = a.shape
    counts = [0] * (cols + 1)
    for k in range(a.nnz):
        counts[a.col_idx[k] + 1] += 1
    for c in range(cols):
        counts[c + 1] += counts[c]
    new_row_ptr = list(counts)

    new_values = [a.dtype.zero] * a.nnz
    new_col_idx = [0] * a.nnz
    nxt = counts[:-1]
    for r in range(rows):
        for k in range(a.row_ptr[r], a.row_ptr[r + 1]):
            c = a.col_idx[k]
            new_values[nxt[c]] = a.values[k]
            new_col_idx[nxt[c]] = r
            nxt[c] += 1

    out.shape = (cols, rows)
    assign(out, new_values, new_col_idx, new_row_ptr)
