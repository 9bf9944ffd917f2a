"""
Vectorised CSR backend.

Same handle type and same observable results as csr_backend_py, including
which zeros get stored, but every operation is a handful of numpy calls
instead of python loops. Entries are keyed by their row-major position
row * cols + col so that sorting keys sorts by row then column.
"""
import numpy as np

from .csr_backend_py import CSRArray, assign, copy, from_csr, _index_type

__device_name__ = "numpy"

__all__ = [
    "CSRArray", "assign", "copy", "from_csr", "from_numpy", "to_numpy",
    "getitem", "trace", "scalar_mul", "eliminate_zeros", "ewise_add",
    "matmul", "transpose",
]


#################
### UTILITIES ###
#################
def _expand_rows(a: CSRArray):
    """Row index of every stored entry"""
    return np.repeat(np.arange(a.shape[0], dtype=_index_type), np.diff(a.row_ptr))


def _row_ptr_from_rows(rows: np.ndarray, n_rows: int):
    counts = np.bincount(rows, minlength=n_rows)
    return np.concatenate([[0], np.cumsum(counts)]).astype(_index_type)


def _accumulate(keys: np.ndarray, vals: np.ndarray, dtype):
    """Sum vals sharing a key, in order of appearance. Returns sorted unique keys and sums."""
    unique, inverse = np.unique(keys, return_inverse=True)
    sums = np.zeros(unique.shape, dtype=dtype.numpy_dtype)
    np.add.at(sums, inverse.reshape(-1), vals)
    return unique, sums


def _assign_keyed(out: CSRArray, keys: np.ndarray, vals: np.ndarray):
    rows, cols = out.shape
    width = max(cols, 1)
    assign(out, vals, keys % width, _row_ptr_from_rows(keys // width, rows))


######################
### DENSE INTEROP ####
######################
def from_numpy(a: np.ndarray, out: CSRArray):
    rows, cols = np.nonzero(a != out.dtype.zero)
    out.shape = a.shape
    assign(out, a[rows, cols], cols, _row_ptr_from_rows(rows, a.shape[0]))


def to_numpy(a: CSRArray):
    out = np.full(a.shape, a.dtype.zero, dtype=a.dtype.numpy_dtype)
    out[_expand_rows(a), a.col_idx] = a.values
    return out


##################
### LOOKUP OPS ###
##################
def getitem(a: CSRArray, row: int, col: int):
    start, end = a.row_ptr[row], a.row_ptr[row + 1]
    hits = np.flatnonzero(a.col_idx[start:end] == col)
    if hits.size == 0:
        return a.dtype.zero
    return a.values[start + hits[0]]


def trace(a: CSRArray):
    on_diagonal = _expand_rows(a) == a.col_idx
    total = a.dtype.zero
    for v in a.values[on_diagonal]:
        total += v
    return total


#################
### SCALAR OP ###
#################
def scalar_mul(a: CSRArray, val):
    a.values *= a.dtype.cast(val)


def eliminate_zeros(a: CSRArray, out: CSRArray):
    keep = a.values != a.dtype.zero
    kept_before = np.concatenate([[0], np.cumsum(keep)]).astype(_index_type)
    out.shape = a.shape
    assign(out, a.values[keep], a.col_idx[keep], kept_before[a.row_ptr])


#################
### EWISE ADD ###
#################
def ewise_add(a: CSRArray, b: CSRArray, out: CSRArray, sparsify: bool = True):
    assert a.shape == b.shape

    width = max(a.shape[1], 1)
    keys = np.concatenate([
        _expand_rows(a) * width + a.col_idx,
        _expand_rows(b) * width + b.col_idx,
    ])
    vals = np.concatenate([a.values, b.values])
    keys, sums = _accumulate(keys, vals, a.dtype)

    if sparsify:
        mask = sums != a.dtype.zero
        keys, sums = keys[mask], sums[mask]

    out.shape = a.shape
    _assign_keyed(out, keys, sums)


##############
### MATMUL ###
##############
def matmul(a: CSRArray, b: CSRArray, out: CSRArray):
    """
    Pair every stored a[r, k] with every stored b[k, c] (gathered from row k
    of b), then sum the products per (r, c). Zero sums are dropped.
    """
    assert a.shape[1] == b.shape[0]

    rows, cols = a.shape[0], b.shape[1]
    width = max(cols, 1)

    b_start = b.row_ptr[a.col_idx]
    fanout = b.row_ptr[a.col_idx + 1] - b_start
    total = int(fanout.sum())

    # position of each product inside b: b_start of its a entry plus its offset in that row
    first = np.cumsum(fanout) - fanout
    b_pos = np.repeat(b_start, fanout) + np.arange(total, dtype=_index_type) - np.repeat(first, fanout)

    products = np.repeat(a.values, fanout) * b.values[b_pos]
    keys = np.repeat(_expand_rows(a), fanout) * width + b.col_idx[b_pos]
    keys, sums = _accumulate(keys, products.astype(a.dtype.numpy_dtype), a.dtype)

    mask = sums != a.dtype.zero
    out.shape = (rows, cols)
    _assign_keyed(out, keys[mask], sums[mask])


#################
### TRANSPOSE ###
#################
def transpose(a: CSRArray, out: CSRArray):
    rows = _expand_rows(a)
    order = np.lexsort((rows, a.col_idx))
    out.shape = (a.shape[1], a.shape[0])
    assign(out, a.values[order], rows[order], _row_ptr_from_rows(a.col_idx[order], a.shape[1]))
