"""Determinant by cofactor (Laplace) expansion."""

import logging

import numpy as np

from . import backend_selection

logger = logging.getLogger(__name__)


def cofactor_determinant(a: np.ndarray):
    """
    Determinant of a square 2-D array, expanding along the first row.

    This is the textbook recursive definition and runs in O(n!) time, so it
    is only practical for small matrices (n around 10 already takes seconds).
    A warning is logged above SPMAT_DET_WARN_ORDER; nothing stops the call.

    Returns a scalar of the array's dtype. The empty matrix has determinant 1.
    """
    assert a.ndim == 2 and a.shape[0] == a.shape[1]
    n = a.shape[0]
    if n > backend_selection.DET_WARN_ORDER:
        logger.warning(
            "cofactor determinant of order %d, this takes O(n!) time", n
        )
    if n == 0:
        return a.dtype.type(1)
    return _expand(a)


def _expand(a: np.ndarray):
    n = a.shape[0]
    if n == 1:
        return a[0, 0]
    if n == 2:
        return a[0, 0] * a[1, 1] - a[0, 1] * a[1, 0]

    det = a.dtype.type(0)
    rest = a[1:]
    for c in range(n):
        if a[0, c] == 0:
            continue
        minor = np.delete(rest, c, axis=1)
        sign = 1 if c % 2 == 0 else -1
        det += sign * a[0, c] * _expand(minor)
    return det
