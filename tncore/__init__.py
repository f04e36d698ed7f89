"""
tncore: dense complex tensors for matrix product operator codes.

Tensors are stored in column-major order (axis 0 varies fastest) in aligned
complex128 buffers; contractions dispatch to dense linear-algebra kernels.
"""

from tncore.config import CoreConfig, DEFAULT_CONFIG
from tncore.core import (
    Tensor,
    identity,
    trace,
    transpose,
    conjugate_transpose,
    sub_tensor,
    multiply,
    contract,
    kronecker_product,
)

__version__ = "0.1.0"

__all__ = [
    "CoreConfig",
    "DEFAULT_CONFIG",
    "Tensor",
    "identity",
    "trace",
    "transpose",
    "conjugate_transpose",
    "sub_tensor",
    "multiply",
    "contract",
    "kronecker_product",
]
