import numpy as np
import pytest
import spmat
from spmat import DenseMatrix


def test_fill_constructor():
    D = DenseMatrix(2, 3, fill=7)
    assert D.shape == (2, 3)
    assert D.rows == 2 and D.cols == 3
    assert not D.is_square
    np.testing.assert_array_equal(D.numpy(), np.full((2, 3), 7.0))
    assert D.dtype is spmat.get_default_dtype()


def test_from_rows():
    D = DenseMatrix.from_rows([[1, 2], [3, 4]])
    assert D.is_square
    assert D.at(1, 0) == 3
    assert D[0, 1] == 2
    assert D.tolist() == [[1.0, 2.0], [3.0, 4.0]]


@pytest.mark.parametrize("rows", [[], [[]], [[1, 2], [3]]], ids=["empty", "empty_row", "ragged"])
def test_from_rows_rejects_non_rectangular(rows):
    with pytest.raises(spmat.ShapeMismatchError):
        DenseMatrix.from_rows(rows)


def test_from_numpy_requires_2d():
    with pytest.raises(spmat.ShapeMismatchError):
        DenseMatrix.from_numpy(np.ones(3))


def test_set_element():
    D = DenseMatrix(2, 2)
    D[0, 1] = 5
    D.set(1, 0, 6)
    np.testing.assert_array_equal(D.numpy(), [[0, 5], [6, 0]])


def test_numpy_returns_copy():
    D = DenseMatrix(2, 2, fill=1)
    D.numpy()[0, 0] = 9
    assert D.at(0, 0) == 1


@pytest.mark.parametrize("index", [(2, 0), (0, 3), (-1, 0)])
def test_out_of_range(index):
    D = DenseMatrix(2, 3)
    with pytest.raises(spmat.OutOfRangeError):
        D.at(*index)
    with pytest.raises(spmat.OutOfRangeError):
        D.set(*index, 1)


def test_add():
    A = DenseMatrix.from_rows([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
    B = DenseMatrix.from_rows([[9, 8, 7], [6, 5, 4], [3, 2, 1]])
    np.testing.assert_array_equal((A + B).numpy(), np.full((3, 3), 10.0))


def test_add_shape_mismatch():
    with pytest.raises(spmat.ShapeMismatchError):
        DenseMatrix(2, 3) + DenseMatrix(3, 2)


def test_multiply():
    A = DenseMatrix.from_rows([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
    B = DenseMatrix.from_rows([[9, 8, 7], [6, 5, 4], [3, 2, 1]])
    np.testing.assert_array_equal(
        (A @ B).numpy(), [[30, 24, 18], [84, 69, 54], [138, 114, 90]]
    )


def test_multiply_rectangular():
    A = DenseMatrix.from_rows([[1, 2, 3]])
    B = DenseMatrix.from_rows([[1], [1], [1]])
    assert (A @ B).tolist() == [[6.0]]
    assert (B @ A).shape == (3, 3)


def test_multiply_dimension_mismatch():
    with pytest.raises(spmat.DimensionMismatchError):
        DenseMatrix(2, 3).multiply(DenseMatrix(2, 3))


def test_transpose():
    A = DenseMatrix.from_rows([[1, 2, 3], [4, 5, 6]])
    T = A.T
    assert T.shape == (3, 2)
    assert T.at(2, 1) == 6
    assert A.at(0, 2) == 3


def test_trace_and_determinant():
    A = DenseMatrix.from_rows([[2, 3, 1], [4, 1, 3], [3, 2, 4]])
    assert A.trace() == 7
    assert A.determinant() == -20.0
    with pytest.raises(spmat.NotSquareError):
        DenseMatrix(2, 3).trace()
    with pytest.raises(spmat.NotSquareError):
        DenseMatrix(2, 3).determinant()


def test_element_types():
    A = DenseMatrix.from_rows([[1, 2], [3, 4]], dtype="int64")
    B = DenseMatrix.from_rows([[1, 2], [3, 4]], dtype="float64")
    assert A.numpy().dtype == np.int64
    assert A.determinant() == -2
    with pytest.raises(spmat.ElementTypeError):
        A + B


def test_repr():
    D = DenseMatrix.from_rows([[1, 0]], dtype="int32")
    assert repr(D) == "DenseMatrix([[1, 0]], dtype=int32)"
