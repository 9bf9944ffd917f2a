"""
Logic for backend selection and library defaults.

The sparse engine is backed by one of several interchangeable modules. The
default one is chosen by the environment variable SPMAT_BACKEND:

    "py"    - pure python loop implementation of the CSR algorithms (default)
    "numpy" - vectorised numpy implementation with identical results

Any matrix can still be moved to another device explicitly with .to(device).

Two more environment variables are read at import time:

    SPMAT_DTYPE           default element type for new matrices ("float64")
    SPMAT_DET_WARN_ORDER  determinant order above which a warning is logged (9)

If an unknown backend is specified, a RuntimeError is raised.
"""
import logging
import os

from .dtypes import ElementType, get_element_type

logger = logging.getLogger(__name__)

_BACKENDS = ("py", "numpy")

BACKEND = os.environ.get("SPMAT_BACKEND", "py")

if BACKEND == "py":
    logger.info("Using python CSR backend")
elif BACKEND == "numpy":
    logger.info("Using numpy CSR backend")
else:
    raise RuntimeError("Unknown spmat backend %s, expected one of %s" % (BACKEND, _BACKENDS))

DET_WARN_ORDER = int(os.environ.get("SPMAT_DET_WARN_ORDER", "9"))

_default_dtype = get_element_type(os.environ.get("SPMAT_DTYPE", "float64"))


def get_default_dtype() -> ElementType:
    return _default_dtype


def set_default_dtype(dtype) -> ElementType:
    """Set the element type used when a constructor is given dtype=None. Returns the previous one."""
    global _default_dtype
    previous = _default_dtype
    _default_dtype = get_element_type(dtype)
    logger.debug("default element type set to %s", _default_dtype.name)
    return previous


def resolve_dtype(dtype) -> ElementType:
    return _default_dtype if dtype is None else get_element_type(dtype)
