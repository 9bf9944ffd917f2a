"""
spmat: dense and compressed sparse row (CSR) matrices over a bound numeric
element type.

    import spmat
    a = spmat.SparseMatrix([[5, 0, 0], [0, 8, 0], [3, 0, 6]])
    a.values, a.col_idx, a.row_ptr
    (a @ a.T).trace()
"""
import logging

from .errors import (
    SpmatError,
    OutOfRangeError,
    ShapeMismatchError,
    DimensionMismatchError,
    NotSquareError,
    CSRFormatError,
    ElementTypeError,
    DeviceMismatchError,
)
from .dtypes import (
    ElementType,
    get_element_type,
    float32,
    float64,
    int32,
    int64,
    complex64,
    complex128,
)
from .backend_selection import BACKEND, get_default_dtype, set_default_dtype
from .dense_matrix import DenseMatrix
from .backend_csr import (
    SparseMatrix,
    SparseBackendDevice,
    csr_py,
    csr_numpy,
    default_device,
    all_devices,
    array,
    csr_array,
    identity,
    zeros,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
