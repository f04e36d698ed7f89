"""Core tensor operations."""

from tncore.core.tensor import (
    Tensor,
    identity,
    trace,
)

from tncore.core.contractions import (
    transpose,
    conjugate_transpose,
    sub_tensor,
    multiply,
    contract,
    kronecker_product,
)

__all__ = [
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
