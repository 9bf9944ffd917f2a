"""
The CSR engine. sparse_matrix.py holds the SparseMatrix front end and the
device wrappers; csr_backend_py.py and csr_backend_numpy.py implement the
algorithms over a shared CSRArray handle. Everything public is re-exported
here.
"""

from .sparse_matrix import *
