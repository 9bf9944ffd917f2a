"""
Exception hierarchy for spmat.

Every error raised by the library inherits from SpmatError, so callers can
catch anything library-specific with a single except clause. Each concrete
error also inherits from the closest builtin (IndexError, ValueError,
TypeError) so code written against plain Python containers keeps working.

All of these are caller errors: they are raised synchronously by the
operation that detected them and no partial result is ever returned.
"""


class SpmatError(Exception):
    """Base exception for all spmat errors."""
    pass


class OutOfRangeError(SpmatError, IndexError):
    """
    Element access outside the declared shape.

    Attributes:
        index: The (row, col) pair that was requested
        shape: The (rows, cols) shape of the matrix
    """

    def __init__(self, index, shape):
        super().__init__(f"index {tuple(index)} out of range for shape {tuple(shape)}")
        self.index = tuple(index)
        self.shape = tuple(shape)


class ShapeMismatchError(SpmatError, ValueError):
    """
    Operand shapes differ where they must be identical (addition), or
    literal row data is not rectangular.
    """

    def __init__(self, message, left=None, right=None):
        super().__init__(message)
        self.left = left
        self.right = right


class DimensionMismatchError(SpmatError, ValueError):
    """Inner dimensions of a matrix product disagree."""

    def __init__(self, message, left=None, right=None):
        super().__init__(message)
        self.left = left
        self.right = right


class NotSquareError(SpmatError, ValueError):
    """Trace or determinant requested on a non-square matrix."""

    def __init__(self, operation, shape):
        super().__init__(f"{operation} requires a square matrix, got shape {tuple(shape)}")
        self.operation = operation
        self.shape = tuple(shape)


class CSRFormatError(SpmatError, ValueError):
    """Raw CSR arrays do not satisfy the CSR format invariants."""
    pass


class ElementTypeError(SpmatError, TypeError):
    """Unsupported element type, or operands bound to different element types."""
    pass


class DeviceMismatchError(SpmatError, ValueError):
    """Sparse operands live on different backend devices."""
    pass
