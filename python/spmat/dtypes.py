"""
Element types.

A matrix is bound to exactly one ElementType when it is constructed. The
element type supplies what the algorithms need from a number: an additive
identity, a test against that identity, and a cast for incoming scalars.
Addition, subtraction and multiplication come from the underlying numpy
scalar type.
"""

from dataclasses import dataclass

import numpy as np

from .errors import ElementTypeError


@dataclass(frozen=True)
class ElementType:
    name: str
    numpy_dtype: np.dtype

    @property
    def zero(self):
        """Additive identity"""
        return self.numpy_dtype.type(0)

    def is_zero(self, x) -> bool:
        return x == self.zero

    def cast(self, x):
        """Convert a python or numpy scalar to this element type (floats truncate for integer types)"""
        try:
            return self.numpy_dtype.type(x)
        except TypeError as e:
            raise ElementTypeError(f"cannot convert {x!r} to {self.name}") from e

    def __repr__(self):
        return f"spmat.{self.name}"


float32 = ElementType("float32", np.dtype(np.float32))
float64 = ElementType("float64", np.dtype(np.float64))
int32 = ElementType("int32", np.dtype(np.int32))
int64 = ElementType("int64", np.dtype(np.int64))
complex64 = ElementType("complex64", np.dtype(np.complex64))
complex128 = ElementType("complex128", np.dtype(np.complex128))

_REGISTRY = {
    t.name: t for t in (float32, float64, int32, int64, complex64, complex128)
}


def supported_types():
    return tuple(_REGISTRY)


def get_element_type(spec) -> ElementType:
    """
    Resolve an element type from an ElementType, a registry name
    (e.g. "float64") or anything numpy accepts as a dtype.

    Raises:
        ElementTypeError: If the type is not one of the supported numeric types.
    """
    if isinstance(spec, ElementType):
        return spec
    if isinstance(spec, str) and spec in _REGISTRY:
        return _REGISTRY[spec]
    try:
        name = np.dtype(spec).name
    except TypeError as e:
        raise ElementTypeError(f"unsupported element type {spec!r}") from e
    if name not in _REGISTRY:
        raise ElementTypeError(
            f"unsupported element type {spec!r}, expected one of {supported_types()}"
        )
    return _REGISTRY[name]


def check_same_type(a: ElementType, b: ElementType, operation: str):
    if a != b:
        raise ElementTypeError(f"cannot {operation} matrices of element types {a.name} and {b.name}")
